"""
hmacsign
Shared-secret HMAC signing and verification for HTTP requests
"""

from .version import __version__
from .exceptions import (
    HmacSignError,
    ConfigurationError,
    DigestError,
    SigningError,
    SigningErrorCodes,
)
from .config import (
    HmacConfig,
    load_config_from_dict,
    load_config_from_json,
    load_config_from_file,
    load_config_from_env,
)
from .crypto import DigestEngine
from .signing import (
    Credential,
    Signature,
    NormalizedRequest,
    normalize,
    build_canonical_string,
    Signer,
    create_signer,
    sign_request,
    format_authorization,
    parse_authorization,
    HmacAuth,
    create_signing_session,
)
from .verification import (
    VerificationReason,
    VerificationResult,
    CredentialStore,
    StaticCredentialStore,
    SkewValidator,
    check_skew,
    parse_http_date,
    Verifier,
    create_verifier,
    verify_signature,
)

__all__ = [
    '__version__',
    # Errors
    'HmacSignError',
    'ConfigurationError',
    'DigestError',
    'SigningError',
    'SigningErrorCodes',
    # Configuration
    'HmacConfig',
    'load_config_from_dict',
    'load_config_from_json',
    'load_config_from_file',
    'load_config_from_env',
    # Digest engine
    'DigestEngine',
    # Signing
    'Credential',
    'Signature',
    'NormalizedRequest',
    'normalize',
    'build_canonical_string',
    'Signer',
    'create_signer',
    'sign_request',
    'format_authorization',
    'parse_authorization',
    'HmacAuth',
    'create_signing_session',
    # Verification
    'VerificationReason',
    'VerificationResult',
    'CredentialStore',
    'StaticCredentialStore',
    'SkewValidator',
    'check_skew',
    'parse_http_date',
    'Verifier',
    'create_verifier',
    'verify_signature',
]
