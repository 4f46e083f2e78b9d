"""
Signature verification engine

This module provides the verifier that authenticates incoming requests: it
normalizes the request, checks the date skew, recomputes the signature with
the shared secret and compares it in constant time. Request data never makes
it raise; every failure is reported as a ``VerificationResult``.
"""

import logging
import time
from typing import Optional, Union

from cryptography.hazmat.primitives import constant_time

from ..config.settings import HmacConfig
from ..exceptions import DigestError, HmacSignError
from ..signing.normalizer import normalize
from ..signing.scheme import AUTHORIZATION_HEADER, parse_authorization
from ..signing.signer import Signer
from ..signing.types import Credential, RawRequest, Signature
from .skew import Clock, SkewValidator
from .types import (
    CredentialProvider,
    CredentialStore,
    VerificationReason,
    VerificationResult,
)

logger = logging.getLogger(__name__)


class Verifier:
    """
    HMAC request verifier

    Stateless after construction; one verifier can be shared between threads.
    """

    def __init__(self, config: Optional[HmacConfig] = None, clock: Clock = time.time):
        """
        Initialize the verifier with configuration.

        Args:
            config: Signing configuration (defaults to HmacConfig())
            clock: Callable returning the current Unix time
        """
        self.config = config or HmacConfig()
        self.signer = Signer(self.config)
        self.skew_validator = SkewValidator(self.config, clock)

    def verify(
        self,
        raw_request: RawRequest,
        supplied_signature: Union[Signature, str, None],
        credential: Optional[Credential],
    ) -> VerificationResult:
        """
        Verify a request signature.

        Args:
            raw_request: Incoming request
            supplied_signature: Signature sent by the client
            credential: Credential the client claims to have signed with

        Returns:
            VerificationResult: ``(accepted, reason)``; reason is OK,
            BAD_REQUEST, SKEW or MISMATCH
        """
        key_id = credential.key_id if isinstance(credential, Credential) else None

        request = normalize(raw_request)
        if request is None:
            return self._reject(VerificationReason.BAD_REQUEST, key_id)

        if not self.skew_validator.check_skew(request):
            return self._reject(VerificationReason.SKEW, key_id)

        if not isinstance(credential, Credential):
            return self._reject(VerificationReason.MISMATCH, key_id)

        supplied = self._decode_supplied(supplied_signature)
        if supplied is None:
            return self._reject(VerificationReason.MISMATCH, key_id)

        try:
            expected = self.signer.sign(request, credential)
        except HmacSignError as e:
            logger.debug(f"Cannot recompute signature: {e}")
            return self._reject(VerificationReason.BAD_REQUEST, key_id)

        expected_raw = self.signer.engine.decode(expected.value)
        if not constant_time.bytes_eq(expected_raw, supplied):
            return self._reject(VerificationReason.MISMATCH, key_id)

        return VerificationResult.ok(key_id)

    def authenticate(self, raw_request: RawRequest, credentials: CredentialProvider) -> VerificationResult:
        """
        Verify a request using its Authorization header.

        The header is parsed as ``<scheme> <key_id>:<signature>`` and the
        credential is looked up through ``credentials``.

        Args:
            raw_request: Incoming request
            credentials: CredentialStore or callable mapping key ID to Credential

        Returns:
            VerificationResult: Result carrying the key ID when it was readable
        """
        request = normalize(raw_request)
        if request is None:
            return self._reject(VerificationReason.BAD_REQUEST)

        parsed = parse_authorization(request.get_header(AUTHORIZATION_HEADER), self.config.scheme)
        if parsed is None:
            return self._reject(VerificationReason.BAD_REQUEST)
        key_id, signature = parsed

        credential = self._lookup(credentials, key_id)
        if credential is None:
            return self._reject(VerificationReason.UNKNOWN_KEY, key_id)

        return self.verify(request, signature, credential)

    def _decode_supplied(self, supplied_signature: Union[Signature, str, None]) -> Optional[bytes]:
        if isinstance(supplied_signature, Signature):
            if supplied_signature.encoding != self.config.encoding:
                return None
            supplied_signature = supplied_signature.value

        if not isinstance(supplied_signature, str) or not supplied_signature:
            return None

        try:
            return self.signer.engine.decode(supplied_signature)
        except DigestError:
            return None

    def _lookup(self, credentials: CredentialProvider, key_id: str) -> Optional[Credential]:
        if isinstance(credentials, CredentialStore):
            credential = credentials.get_credential(key_id)
        else:
            credential = credentials(key_id)

        if credential is not None and not isinstance(credential, Credential):
            logger.warning(f"Credential provider returned {type(credential).__name__} for key {key_id}")
            return None
        return credential

    def _reject(self, reason: VerificationReason, key_id: Optional[str] = None) -> VerificationResult:
        logger.debug(f"Rejected request (reason: {reason.value}, key: {key_id})")
        return VerificationResult.reject(reason, key_id)


def create_verifier(config: Optional[HmacConfig] = None) -> Verifier:
    """
    Create a new verifier.

    Args:
        config: Signing configuration

    Returns:
        Verifier: Configured verifier instance
    """
    return Verifier(config)


def verify_signature(raw_request: RawRequest, supplied_signature: Union[Signature, str, None],
                     credential: Optional[Credential],
                     config: Optional[HmacConfig] = None) -> VerificationResult:
    """Verify a request signature with the given configuration"""
    return create_verifier(config).verify(raw_request, supplied_signature, credential)
