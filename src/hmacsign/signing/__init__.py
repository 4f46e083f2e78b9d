"""
hmacsign - Request Signing Module

Request normalization, canonical string construction and HMAC signing, plus
the Authorization header scheme and ``requests`` integration.
"""

from .types import (
    Credential,
    Signature,
    RawRequest,
)

from .normalizer import (
    NormalizedRequest,
    normalize,
)

from .canonical_message import (
    build_canonical_string,
    canonical_query_string,
    select_signed_headers,
)

from .signer import (
    Signer,
    create_signer,
    sign_request,
)

from .scheme import (
    AUTHORIZATION_HEADER,
    format_authorization,
    parse_authorization,
)

from .integration import (
    HmacAuth,
    create_signing_session,
    prepared_request_to_raw,
)

# Public API exports
__all__ = [
    # Types
    'Credential',
    'Signature',
    'RawRequest',
    # Normalization
    'NormalizedRequest',
    'normalize',
    # Canonical string
    'build_canonical_string',
    'canonical_query_string',
    'select_signed_headers',
    # Core signing functionality
    'Signer',
    'create_signer',
    'sign_request',
    # Authorization scheme
    'AUTHORIZATION_HEADER',
    'format_authorization',
    'parse_authorization',
    # HTTP Integration
    'HmacAuth',
    'create_signing_session',
    'prepared_request_to_raw',
]
