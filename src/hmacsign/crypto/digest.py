"""
Digest and HMAC primitives for request signing

This module wraps the ``cryptography`` hash and HMAC primitives behind a
small engine with a configurable algorithm and text encoding. Text input is
always hashed as its UTF-8 bytes; callers that encode text differently on
the signing and verifying side will get different digests.
"""

import base64
import binascii
from typing import Callable, Dict, Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from ..exceptions import ConfigurationError, DigestError

DEFAULT_ALGORITHM = 'sha256'
DEFAULT_ENCODING = 'hex'
TEXT_ENCODING = 'utf-8'

BytesLike = Union[bytes, bytearray, memoryview, str]

HASH_ALGORITHMS: Dict[str, Callable[[], hashes.HashAlgorithm]] = {
    'sha1': hashes.SHA1,
    'sha224': hashes.SHA224,
    'sha256': hashes.SHA256,
    'sha384': hashes.SHA384,
    'sha512': hashes.SHA512,
    'sha512-224': hashes.SHA512_224,
    'sha512-256': hashes.SHA512_256,
    'sha3-224': hashes.SHA3_224,
    'sha3-256': hashes.SHA3_256,
    'sha3-384': hashes.SHA3_384,
    'sha3-512': hashes.SHA3_512,
    'blake2b': lambda: hashes.BLAKE2b(64),
    'blake2s': lambda: hashes.BLAKE2s(32),
}

_ALGORITHM_ALIASES = {
    'sha-1': 'sha1',
    'sha-224': 'sha224',
    'sha-256': 'sha256',
    'sha-384': 'sha384',
    'sha-512': 'sha512',
    'sha512/224': 'sha512-224',
    'sha512/256': 'sha512-256',
}

_ENCODERS: Dict[str, Callable[[bytes], str]] = {
    'hex': lambda raw: raw.hex(),
    'base64': lambda raw: base64.b64encode(raw).decode('ascii'),
    'base64url': lambda raw: base64.urlsafe_b64encode(raw).decode('ascii'),
}

_DECODERS: Dict[str, Callable[[str], bytes]] = {
    'hex': bytes.fromhex,
    'base64': lambda text: base64.b64decode(text, validate=True),
    'base64url': lambda text: base64.b64decode(text, altchars=b'-_', validate=True),
}

SUPPORTED_ALGORITHMS = tuple(HASH_ALGORITHMS)
SUPPORTED_ENCODINGS = tuple(_ENCODERS)


def normalize_algorithm_name(algorithm: str) -> str:
    """
    Map an algorithm identifier onto its canonical spelling.

    Args:
        algorithm: Identifier such as ``'SHA256'``, ``'sha-256'`` or ``'sha3_256'``

    Returns:
        str: Canonical lower-case name (not necessarily supported)
    """
    name = algorithm.strip().lower().replace('_', '-')
    return _ALGORITHM_ALIASES.get(name, name)


def to_bytes(data: BytesLike, what: str = 'data') -> bytes:
    """
    Convert text or a bytes-like value to bytes.

    Text is encoded as UTF-8. Anything else raises DigestError.
    """
    if isinstance(data, str):
        return data.encode(TEXT_ENCODING)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise DigestError(
        f"Cannot digest {what} of type {type(data).__name__}",
        "INVALID_INPUT",
        {"type": type(data).__name__}
    )


class DigestEngine:
    """
    Hash and HMAC engine bound to one algorithm and a default text encoding.

    Both settings are validated when the engine is created, so a call never
    fails because of configuration.
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, encoding: str = DEFAULT_ENCODING):
        """
        Initialize the engine.

        Args:
            algorithm: Hash algorithm identifier
            encoding: Default output encoding ('hex', 'base64' or 'base64url')

        Raises:
            ConfigurationError: If the algorithm or encoding is not supported
        """
        if not isinstance(algorithm, str):
            raise ConfigurationError(
                f"Algorithm must be a string, got {type(algorithm).__name__}",
                "UNSUPPORTED_ALGORITHM"
            )

        name = normalize_algorithm_name(algorithm)
        factory = HASH_ALGORITHMS.get(name)
        if factory is None:
            raise ConfigurationError(
                f"Unsupported digest algorithm: {algorithm}",
                "UNSUPPORTED_ALGORITHM",
                {"algorithm": algorithm, "supported": list(SUPPORTED_ALGORITHMS)}
            )

        # The OpenSSL build backing cryptography decides what is really available
        try:
            hashes.Hash(factory())
            crypto_hmac.HMAC(b'probe', factory())
        except UnsupportedAlgorithm as e:
            raise ConfigurationError(
                f"Digest algorithm not available on this platform: {algorithm}",
                "UNSUPPORTED_ALGORITHM",
                {"algorithm": algorithm, "original_error": str(e)}
            )

        self.algorithm = name
        self.encoding = self._check_encoding(encoding)
        self._factory = factory

    @property
    def digest_size(self) -> int:
        """Size of the raw digest in bytes"""
        return self._factory().digest_size

    def hash(self, data: BytesLike, encoding: Optional[str] = None) -> str:
        """
        Compute a one-way digest of ``data``.

        Args:
            data: Bytes to hash; text is hashed as UTF-8
            encoding: Output encoding (defaults to the engine encoding)

        Returns:
            str: Encoded digest
        """
        enc = self._check_encoding(encoding) if encoding is not None else self.encoding
        digest = hashes.Hash(self._factory())
        digest.update(to_bytes(data))
        return _ENCODERS[enc](digest.finalize())

    def hmac(self, data: BytesLike, key: BytesLike, encoding: Optional[str] = None) -> str:
        """
        Compute a keyed digest of ``data`` with secret ``key``.

        Args:
            data: Message bytes; text is used as UTF-8
            key: Secret key; text is used as UTF-8
            encoding: Output encoding (defaults to the engine encoding)

        Returns:
            str: Encoded HMAC
        """
        enc = self._check_encoding(encoding) if encoding is not None else self.encoding
        mac = crypto_hmac.HMAC(to_bytes(key, 'key'), self._factory())
        mac.update(to_bytes(data))
        return _ENCODERS[enc](mac.finalize())

    def decode(self, digest: str, encoding: Optional[str] = None) -> bytes:
        """
        Decode an encoded digest back to raw bytes.

        Args:
            digest: Encoded digest text
            encoding: Encoding of ``digest`` (defaults to the engine encoding)

        Returns:
            bytes: Raw digest

        Raises:
            DigestError: If ``digest`` is not valid text in that encoding
        """
        enc = self._check_encoding(encoding) if encoding is not None else self.encoding
        if not isinstance(digest, str):
            raise DigestError(
                f"Digest must be a string, got {type(digest).__name__}",
                "INVALID_DIGEST"
            )

        try:
            return _DECODERS[enc](digest.strip())
        except (ValueError, binascii.Error) as e:
            raise DigestError(
                f"Malformed {enc} digest",
                "INVALID_DIGEST",
                {"encoding": enc, "original_error": str(e)}
            )

    def _check_encoding(self, encoding: str) -> str:
        name = encoding.strip().lower() if isinstance(encoding, str) else encoding
        if not isinstance(name, str) or name not in _ENCODERS:
            raise ConfigurationError(
                f"Unsupported digest encoding: {encoding}",
                "UNSUPPORTED_ENCODING",
                {"encoding": encoding, "supported": list(SUPPORTED_ENCODINGS)}
            )
        return name

    def __repr__(self) -> str:
        return f"DigestEngine(algorithm={self.algorithm!r}, encoding={self.encoding!r})"
