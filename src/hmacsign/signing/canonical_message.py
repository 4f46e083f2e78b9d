"""
Canonical string construction for HMAC request signatures

The canonical string is the exact text that gets signed. It is built from a
``NormalizedRequest`` only, so the result never depends on how the caller
ordered or cased its headers:

    METHOD
    /path
    canonical query string
    name:value            (one line per signed header, alphabetical)
    name;name;...         (signed header names)
    hex digest of the body
"""

from typing import Iterable, List, Optional, Tuple
from urllib.parse import quote

from ..config.settings import UNSIGNABLE_HEADERS
from ..crypto.digest import DigestEngine
from .normalizer import NormalizedRequest

# RFC 3986 unreserved characters
_QUERY_SAFE = '-_.~'


def canonical_query_string(query: Iterable[Tuple[str, str]]) -> str:
    """
    Build the canonical query string.

    Args:
        query: (name, value) pairs

    Returns:
        str: Sorted, percent-encoded pairs joined with '&'
    """
    encoded = sorted(
        (quote(name, safe=_QUERY_SAFE), quote(value, safe=_QUERY_SAFE))
        for name, value in query
    )
    return '&'.join(f"{name}={value}" for name, value in encoded)


def select_signed_headers(request: NormalizedRequest,
                          signed_headers: Optional[Iterable[str]] = None) -> List[Tuple[str, str]]:
    """
    Pick the headers covered by the signature.

    Args:
        request: Normalized request
        signed_headers: Lower-case names to sign; None signs every header
            except the ones that carry the signature

    Returns:
        list: Alphabetically ordered (name, value) pairs
    """
    if signed_headers is None:
        wanted = None
    else:
        wanted = {name.lower() for name in signed_headers}

    selected = []
    for name, value in request.header_items:
        if name in UNSIGNABLE_HEADERS:
            continue
        if wanted is not None and name not in wanted:
            continue
        selected.append((name, value))
    return selected


def build_canonical_string(request: NormalizedRequest,
                           engine: DigestEngine,
                           signed_headers: Optional[Iterable[str]] = None) -> str:
    """
    Build the canonical string to sign.

    Args:
        request: Normalized request
        engine: Digest engine used for the body hash
        signed_headers: Header names to sign (None for all)

    Returns:
        str: Canonical string
    """
    headers = select_signed_headers(request, signed_headers)

    lines = [request.method, request.path, canonical_query_string(request.query)]
    lines.extend(f"{name}:{value}" for name, value in headers)
    lines.append(';'.join(name for name, _ in headers))
    lines.append(engine.hash(request.body, 'hex'))
    return '\n'.join(lines)
