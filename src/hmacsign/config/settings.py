"""
Configuration for request signing and verification

Provides the immutable ``HmacConfig`` shared by the signer, the skew
validator and the verifier, plus loaders that build it from dictionaries,
JSON documents, files and environment variables.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from ..crypto.digest import (
    DEFAULT_ALGORITHM,
    DEFAULT_ENCODING,
    DigestEngine,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_DATE_SKEW = 900  # 15 minutes
DEFAULT_SCHEME = 'HMAC'
DEFAULT_ENV_PREFIX = 'HMACSIGN_'

# Authorization carries the signature, so it can never be part of it
UNSIGNABLE_HEADERS = frozenset({'authorization'})

_DISABLED_WORDS = {'', 'false', 'off', 'no', 'none', 'disabled'}
_TRUE_WORDS = {'1', 'true', 'yes', 'on'}


@dataclass(frozen=True)
class HmacConfig:
    """
    Immutable signing configuration

    Attributes:
        algorithm: Hash/HMAC algorithm identifier
        encoding: Text encoding of signatures ('hex', 'base64', 'base64url')
        acceptable_date_skew: Allowed clock skew in seconds, None when disabled
        signed_headers: Header names covered by signatures, None for all headers
        scheme: Authorization header scheme token
        debug: Log canonical strings at DEBUG level
    """
    algorithm: str = DEFAULT_ALGORITHM
    encoding: str = DEFAULT_ENCODING
    acceptable_date_skew: Optional[int] = DEFAULT_DATE_SKEW
    signed_headers: Optional[Tuple[str, ...]] = None
    scheme: str = DEFAULT_SCHEME
    debug: bool = False

    def __post_init__(self):
        """Validate and canonicalize every option"""
        # Raises ConfigurationError for anything unsupported
        engine = DigestEngine(self.algorithm, self.encoding)
        object.__setattr__(self, 'algorithm', engine.algorithm)
        object.__setattr__(self, 'encoding', engine.encoding)
        object.__setattr__(self, 'acceptable_date_skew', _validate_skew(self.acceptable_date_skew))
        object.__setattr__(self, 'signed_headers', _validate_signed_headers(self.signed_headers))

        if not isinstance(self.scheme, str) or not self.scheme.strip() or any(c.isspace() for c in self.scheme.strip()):
            raise ConfigurationError(
                f"Invalid authorization scheme: {self.scheme!r}",
                "INVALID_SCHEME"
            )
        object.__setattr__(self, 'scheme', self.scheme.strip())
        object.__setattr__(self, 'debug', bool(self.debug))

    @property
    def skew_enabled(self) -> bool:
        """True when request dates are checked"""
        return self.acceptable_date_skew is not None

    def create_engine(self) -> DigestEngine:
        """Create a digest engine for this configuration"""
        return DigestEngine(self.algorithm, self.encoding)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dictionary (loadable by load_config_from_dict)"""
        data = asdict(self)
        if data['signed_headers'] is not None:
            data['signed_headers'] = list(data['signed_headers'])
        return data


def _validate_skew(value: Any) -> Optional[int]:
    if value is None or value is False:
        return None

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(
            f"acceptable_date_skew must be disabled or a number of seconds, got {value!r}",
            "INVALID_DATE_SKEW",
            {"value": repr(value)}
        )

    if value < 0 or (isinstance(value, float) and not value.is_integer()):
        raise ConfigurationError(
            f"acceptable_date_skew must be a non-negative whole number of seconds, got {value!r}",
            "INVALID_DATE_SKEW",
            {"value": value}
        )

    return int(value)


def _validate_signed_headers(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None

    if isinstance(value, str):
        value = value.replace(',', ';').split(';')

    if not isinstance(value, Iterable):
        raise ConfigurationError(
            f"signed_headers must be a list of header names, got {value!r}",
            "INVALID_SIGNED_HEADERS"
        )

    names = set()
    for name in value:
        if not isinstance(name, str):
            raise ConfigurationError(
                f"Header names must be strings, got {name!r}",
                "INVALID_SIGNED_HEADERS"
            )
        name = name.strip().lower()
        if not name:
            continue
        if name in UNSIGNABLE_HEADERS:
            raise ConfigurationError(
                f"Header cannot be signed: {name}",
                "INVALID_SIGNED_HEADERS",
                {"header": name}
            )
        names.add(name)

    return tuple(sorted(names))


# camelCase option names are accepted alongside snake_case
_KEY_ALIASES = {
    'algorithm': 'algorithm',
    'encoding': 'encoding',
    'signatureencoding': 'encoding',
    'signature_encoding': 'encoding',
    'acceptable_date_skew': 'acceptable_date_skew',
    'acceptabledateskew': 'acceptable_date_skew',
    'signed_headers': 'signed_headers',
    'signedheaders': 'signed_headers',
    'scheme': 'scheme',
    'debug': 'debug',
}


def load_config_from_dict(data: Mapping[str, Any]) -> HmacConfig:
    """
    Build configuration from a dictionary.

    Args:
        data: Option mapping (snake_case or camelCase keys)

    Returns:
        HmacConfig: Validated configuration

    Raises:
        ConfigurationError: For unknown keys or invalid values
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(data).__name__}",
            "INVALID_CONFIG"
        )

    options: Dict[str, Any] = {}
    for key, value in data.items():
        field_name = _KEY_ALIASES.get(str(key).lower())
        if field_name is None:
            raise ConfigurationError(
                f"Unknown configuration option: {key}",
                "UNKNOWN_OPTION",
                {"option": key, "known": sorted(set(_KEY_ALIASES.values()))}
            )
        if field_name == 'acceptable_date_skew' and isinstance(value, str):
            value = _parse_skew_text(value)
        if field_name == 'debug' and isinstance(value, str):
            value = value.strip().lower() in _TRUE_WORDS
        options[field_name] = value

    return HmacConfig(**options)


def load_config_from_json(text: str) -> HmacConfig:
    """
    Build configuration from a JSON document.

    Raises:
        ConfigurationError: If the document is not valid JSON or not an object
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON configuration: {e}",
            "INVALID_JSON",
            {"line": e.lineno, "column": e.colno}
        )
    return load_config_from_dict(data)


def load_config_from_file(path: Union[str, Path]) -> HmacConfig:
    """Build configuration from a JSON file."""
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read configuration file {config_path}: {e}",
            "CONFIG_FILE_UNREADABLE",
            {"path": str(config_path)}
        )

    logger.info(f"Loading signing configuration from {config_path}")
    return load_config_from_json(text)


def load_config_from_env(prefix: str = DEFAULT_ENV_PREFIX,
                         environ: Optional[Mapping[str, str]] = None) -> HmacConfig:
    """
    Build configuration from environment variables.

    Recognized variables (with the default prefix): HMACSIGN_ALGORITHM,
    HMACSIGN_ENCODING, HMACSIGN_ACCEPTABLE_DATE_SKEW, HMACSIGN_SIGNED_HEADERS
    (comma or semicolon separated), HMACSIGN_SCHEME and HMACSIGN_DEBUG.
    Unset variables keep their defaults.
    """
    env = os.environ if environ is None else environ
    options: Dict[str, Any] = {}
    for field_name in sorted(set(_KEY_ALIASES.values())):
        value = env.get(f"{prefix}{field_name.upper()}")
        if value is not None:
            options[field_name] = value

    if options:
        logger.info(f"Loading signing configuration from environment ({', '.join(sorted(options))})")
    return load_config_from_dict(options)


def _parse_skew_text(value: str) -> Optional[int]:
    text = value.strip().lower()
    if text in _DISABLED_WORDS:
        return None
    try:
        return int(text)
    except ValueError:
        raise ConfigurationError(
            f"acceptable_date_skew must be disabled or a number of seconds, got {value!r}",
            "INVALID_DATE_SKEW",
            {"value": value}
        )
