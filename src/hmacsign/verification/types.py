"""
Type definitions for signature verification

This module provides the verification result types and the credential
lookup protocol used by the verifier.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Protocol, Union, runtime_checkable

from ..signing.types import Credential


class VerificationReason(str, Enum):
    """Why a request was accepted or rejected"""
    OK = "OK"
    BAD_REQUEST = "BAD_REQUEST"
    SKEW = "SKEW"
    MISMATCH = "MISMATCH"
    UNKNOWN_KEY = "UNKNOWN_KEY"


@dataclass(frozen=True)
class VerificationResult:
    """
    Outcome of a verification

    Unpacks as ``accepted, reason = result``.

    Attributes:
        accepted: True only when every check passed
        reason: Reason code, OK when accepted
        key_id: Key identifier of the credential involved, when known
    """
    accepted: bool
    reason: VerificationReason
    key_id: Optional[str] = None

    def __iter__(self) -> Iterator[Any]:
        return iter((self.accepted, self.reason))

    @classmethod
    def ok(cls, key_id: Optional[str] = None) -> 'VerificationResult':
        return cls(True, VerificationReason.OK, key_id)

    @classmethod
    def reject(cls, reason: VerificationReason, key_id: Optional[str] = None) -> 'VerificationResult':
        return cls(False, reason, key_id)


@runtime_checkable
class CredentialStore(Protocol):
    """Protocol for credential lookup implementations"""

    def get_credential(self, key_id: str) -> Optional[Credential]:
        """Return the credential for ``key_id`` or None"""
        ...


CredentialProvider = Union[CredentialStore, Callable[[str], Optional[Credential]]]


class StaticCredentialStore:
    """In-memory credential store keyed by key ID"""

    def __init__(self, secrets: Optional[Mapping[str, Union[bytes, str]]] = None):
        """
        Args:
            secrets: Mapping of key ID to secret
        """
        self._credentials: Dict[str, Credential] = {}
        for key_id, secret in (secrets or {}).items():
            self.add(Credential(key_id, secret))

    def add(self, credential: Credential) -> None:
        self._credentials[credential.key_id] = credential

    def remove(self, key_id: str) -> None:
        self._credentials.pop(key_id, None)

    def get_credential(self, key_id: str) -> Optional[Credential]:
        return self._credentials.get(key_id)

    def __contains__(self, key_id: object) -> bool:
        return key_id in self._credentials

    def __len__(self) -> int:
        return len(self._credentials)
