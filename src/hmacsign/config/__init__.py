"""
Configuration management for hmacsign

One immutable ``HmacConfig`` is built (and validated) once and passed to the
signer, skew validator and verifier.
"""

from .settings import (
    HmacConfig,
    DEFAULT_DATE_SKEW,
    DEFAULT_SCHEME,
    DEFAULT_ENV_PREFIX,
    UNSIGNABLE_HEADERS,
    load_config_from_dict,
    load_config_from_json,
    load_config_from_file,
    load_config_from_env,
)

__all__ = [
    'HmacConfig',
    'DEFAULT_DATE_SKEW',
    'DEFAULT_SCHEME',
    'DEFAULT_ENV_PREFIX',
    'UNSIGNABLE_HEADERS',
    'load_config_from_dict',
    'load_config_from_json',
    'load_config_from_file',
    'load_config_from_env',
]
