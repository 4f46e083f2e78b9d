"""
HMAC request signer

This module provides the signer that turns a normalized request and a shared
secret into a deterministic signature, and helpers that produce the
``Authorization`` header for outgoing requests.
"""

import logging
from typing import Optional

from ..config.settings import HmacConfig
from ..exceptions import SigningError, SigningErrorCodes
from .canonical_message import build_canonical_string
from .normalizer import NormalizedRequest, normalize
from .scheme import format_authorization
from .types import Credential, RawRequest, Signature

logger = logging.getLogger(__name__)


class Signer:
    """
    HMAC request signer

    Signing is a pure function of the request, the credential and the
    configuration; one signer can be shared between threads.
    """

    def __init__(self, config: Optional[HmacConfig] = None):
        """
        Initialize the signer with configuration.

        Args:
            config: Signing configuration (defaults to HmacConfig())
        """
        self.config = config or HmacConfig()
        self.engine = self.config.create_engine()

    def string_to_sign(self, request: NormalizedRequest) -> str:
        """
        Build the canonical string for a normalized request.

        Args:
            request: Request produced by normalize()

        Returns:
            str: Canonical string

        Raises:
            SigningError: If ``request`` was not normalized
        """
        if not isinstance(request, NormalizedRequest):
            raise SigningError(
                f"Expected a NormalizedRequest, got {type(request).__name__}",
                SigningErrorCodes.NOT_NORMALIZED
            )

        canonical = build_canonical_string(request, self.engine, self.config.signed_headers)
        if self.config.debug:
            logger.debug(f"String to sign:\n{canonical}")
        return canonical

    def sign(self, request: NormalizedRequest, credential: Credential) -> Signature:
        """
        Sign a normalized request.

        Args:
            request: Request produced by normalize()
            credential: Credential whose secret keys the HMAC

        Returns:
            Signature: Encoded signature

        Raises:
            SigningError: If the request was not normalized or the credential is invalid
        """
        if not isinstance(credential, Credential):
            raise SigningError(
                f"Expected a Credential, got {type(credential).__name__}",
                SigningErrorCodes.INVALID_CREDENTIAL
            )

        canonical = self.string_to_sign(request)
        value = self.engine.hmac(canonical, credential.secret)
        return Signature(value=value, encoding=self.engine.encoding)

    def sign_request(self, raw_request: RawRequest, credential: Credential) -> Signature:
        """
        Normalize and sign a raw request.

        Raises:
            SigningError: If the request cannot be normalized
        """
        request = normalize(raw_request)
        if request is None:
            raise SigningError(
                "Request cannot be normalized for signing",
                SigningErrorCodes.INVALID_REQUEST,
                {"type": type(raw_request).__name__}
            )
        return self.sign(request, credential)

    def authorization_header(self, raw_request: RawRequest, credential: Credential) -> str:
        """
        Build the Authorization header value for a raw request.

        Args:
            raw_request: Request to sign
            credential: Signing credential

        Returns:
            str: Value such as ``HMAC key-id:signature``
        """
        signature = self.sign_request(raw_request, credential)
        return format_authorization(credential.key_id, signature, self.config.scheme)


def create_signer(config: Optional[HmacConfig] = None) -> Signer:
    """
    Create a new signer.

    Args:
        config: Signing configuration

    Returns:
        Signer: Configured signer instance
    """
    return Signer(config)


def sign_request(raw_request: RawRequest, credential: Credential,
                 config: Optional[HmacConfig] = None) -> Signature:
    """
    Sign a request with the given configuration.

    Args:
        raw_request: Request to sign
        credential: Signing credential
        config: Optional signing configuration

    Returns:
        Signature: Encoded signature
    """
    return create_signer(config).sign_request(raw_request, credential)
