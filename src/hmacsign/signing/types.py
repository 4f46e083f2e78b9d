"""
Type definitions for request signing

This module provides the credential and signature value types shared by the
signer and the verifier.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from ..crypto.digest import TEXT_ENCODING
from ..exceptions import SigningError, SigningErrorCodes

# Anything the normalizer accepts: a mapping or an object with request attributes
RawRequest = Union[Mapping[str, Any], Any]


@dataclass(frozen=True)
class Credential:
    """
    Shared-secret credential

    Attributes:
        key_id: Public identifier of the key
        secret: Secret key bytes (text is stored as UTF-8)
    """
    key_id: str
    secret: bytes = field(repr=False)

    def __post_init__(self):
        """Validate credential after initialization"""
        if not isinstance(self.key_id, str) or not self.key_id:
            raise SigningError(
                "Credential key ID must be a non-empty string",
                SigningErrorCodes.INVALID_CREDENTIAL
            )

        if isinstance(self.secret, str):
            object.__setattr__(self, 'secret', self.secret.encode(TEXT_ENCODING))
        elif isinstance(self.secret, (bytearray, memoryview)):
            object.__setattr__(self, 'secret', bytes(self.secret))
        elif not isinstance(self.secret, bytes):
            raise SigningError(
                "Credential secret must be bytes or text",
                SigningErrorCodes.INVALID_CREDENTIAL,
                {"key_id": self.key_id}
            )


@dataclass(frozen=True)
class Signature:
    """
    Encoded request signature

    Attributes:
        value: Encoded HMAC digest
        encoding: Encoding used to render ``value``
    """
    value: str
    encoding: str

    def __str__(self) -> str:
        return self.value
