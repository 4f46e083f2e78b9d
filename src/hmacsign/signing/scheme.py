"""
Authorization header scheme

Signatures travel in the ``Authorization`` header as
``<scheme> <key_id>:<signature>``, e.g. ``HMAC client-1:3WOx4QHaZl...``.
"""

from typing import Optional, Tuple, Union

from ..config.settings import DEFAULT_SCHEME
from ..exceptions import SigningError, SigningErrorCodes
from .types import Signature

AUTHORIZATION_HEADER = 'authorization'


def format_authorization(key_id: str, signature: Union[Signature, str], scheme: str = DEFAULT_SCHEME) -> str:
    """
    Format an Authorization header value.

    Args:
        key_id: Credential key identifier
        signature: Signature or encoded signature text
        scheme: Scheme token

    Returns:
        str: Header value
    """
    if not key_id or ':' in key_id or any(c.isspace() for c in key_id):
        raise SigningError(
            f"Key ID cannot be empty or contain ':' or whitespace: {key_id!r}",
            SigningErrorCodes.INVALID_CREDENTIAL
        )
    return f"{scheme} {key_id}:{signature}"


def parse_authorization(value: Optional[str], scheme: str = DEFAULT_SCHEME) -> Optional[Tuple[str, str]]:
    """
    Parse an Authorization header value.

    Args:
        value: Header value
        scheme: Expected scheme token (case-insensitive)

    Returns:
        (key_id, signature), or None when the value is missing or malformed
    """
    if not isinstance(value, str):
        return None

    parts = value.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != scheme.lower():
        return None

    key_id, sep, signature = parts[1].strip().partition(':')
    if not sep or not key_id or not signature or any(c.isspace() for c in key_id + signature):
        return None
    return key_id, signature
