"""
Cryptographic primitives for hmacsign
"""

from .digest import (
    DigestEngine,
    DEFAULT_ALGORITHM,
    DEFAULT_ENCODING,
    SUPPORTED_ALGORITHMS,
    SUPPORTED_ENCODINGS,
    normalize_algorithm_name,
    to_bytes,
)

__all__ = [
    'DigestEngine',
    'DEFAULT_ALGORITHM',
    'DEFAULT_ENCODING',
    'SUPPORTED_ALGORITHMS',
    'SUPPORTED_ENCODINGS',
    'normalize_algorithm_name',
    'to_bytes',
]
