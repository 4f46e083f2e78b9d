"""
HTTP client integration for request signing

This module plugs the signer into the ``requests`` library so outgoing
requests carry an ``Authorization`` header (and a ``Date`` header for the
server's skew check).
"""

import logging
from email.utils import formatdate
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest

from ..config.settings import HmacConfig
from ..exceptions import SigningError, SigningErrorCodes
from .signer import Signer
from .types import Credential

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {'http': 80, 'https': 443}


def prepared_request_to_raw(request: PreparedRequest) -> Dict[str, Any]:
    """
    Describe a prepared request in the shape the normalizer accepts.

    The host header is left to the normalizer, which rebuilds it the way
    the HTTP connection will send it (the port is dropped for the scheme's
    default port).

    Raises:
        SigningError: If the URL cannot be split into host and port
    """
    parts = urlsplit(request.url)
    try:
        port = parts.port
    except ValueError as e:
        raise SigningError(
            f"Invalid port in URL: {request.url}",
            SigningErrorCodes.INVALID_REQUEST,
            {"url": request.url, "original_error": str(e)}
        )

    host = parts.netloc.rpartition('@')[2]
    if port is not None:
        host = host[:host.rfind(':')]
    if port == _DEFAULT_PORTS.get(parts.scheme):
        port = None

    return {
        'method': request.method,
        'host': host.lower(),
        'port': port,
        'path': parts.path,
        'query': parts.query,
        'headers': request.headers,
        'body': request.body,
    }


class HmacAuth(AuthBase):
    """
    ``requests`` authentication handler that signs every request.

    Example:
        >>> session = requests.Session()
        >>> session.auth = HmacAuth(Credential('client-1', 'secret'))
    """

    def __init__(self, credential: Credential, config: Optional[HmacConfig] = None,
                 add_date: bool = True):
        """
        Initialize the handler.

        Args:
            credential: Signing credential
            config: Signing configuration (defaults to HmacConfig())
            add_date: Add a Date header when the request has none
        """
        self.credential = credential
        self.signer = Signer(config)
        self.add_date = add_date

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        if self.add_date and 'Date' not in request.headers:
            request.headers['Date'] = formatdate(usegmt=True)

        raw = prepared_request_to_raw(request)
        request.headers['Authorization'] = self.signer.authorization_header(raw, self.credential)

        logger.debug(f"Signed {request.method} request to {request.url} with key {self.credential.key_id}")
        return request


def create_signing_session(credential: Credential, config: Optional[HmacConfig] = None,
                           session: Optional[requests.Session] = None) -> requests.Session:
    """
    Create a requests session that signs all outgoing requests.

    Args:
        credential: Signing credential
        config: Optional signing configuration
        session: Existing session to configure (a new one is created otherwise)

    Returns:
        requests.Session: Session with HmacAuth installed
    """
    session = session or requests.Session()
    session.auth = HmacAuth(credential, config)
    logger.info(f"Configured request signing for key ID: {credential.key_id}")
    return session
