"""
hmacsign - Signature Verification Module

Clock skew validation and constant-time signature verification for incoming
requests, with optional Authorization header parsing and credential lookup.
"""

from .types import (
    VerificationReason,
    VerificationResult,
    CredentialStore,
    CredentialProvider,
    StaticCredentialStore,
)

from .skew import (
    SkewValidator,
    check_skew,
    parse_http_date,
    DATE_HEADER,
)

from .verifier import (
    Verifier,
    create_verifier,
    verify_signature,
)

__all__ = [
    # Types
    'VerificationReason',
    'VerificationResult',
    'CredentialStore',
    'CredentialProvider',
    'StaticCredentialStore',
    # Skew validation
    'SkewValidator',
    'check_skew',
    'parse_http_date',
    'DATE_HEADER',
    # Verification
    'Verifier',
    'create_verifier',
    'verify_signature',
]
