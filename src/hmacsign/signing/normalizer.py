"""
Request normalization for signing and verification

This module turns a loosely structured "request-ish" value (a dictionary, a
framework request object, or a previously normalized request) into a strict,
immutable ``NormalizedRequest``. Header names are lower-cased, the header set
is ordered alphabetically, and a ``host`` header is synthesized from the
``host``/``port`` fields when the caller did not send one.

Normalization never raises for bad input: anything that cannot be coerced
without guessing yields ``None``. Caller data is only read, never mutated or
aliased.
"""

import logging
from collections.abc import Mapping, Sequence, Set
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl

from ..crypto.digest import TEXT_ENCODING
from .types import RawRequest

logger = logging.getLogger(__name__)

REQUEST_FIELDS = ('method', 'host', 'port', 'path', 'query', 'headers', 'body')

HeaderItems = Tuple[Tuple[str, str], ...]
QueryItems = Tuple[Tuple[str, str], ...]


class _Rejected(Exception):
    """Internal signal for input that cannot be normalized"""


@dataclass(frozen=True)
class NormalizedRequest:
    """
    Canonical internal form of a request

    Only ``normalize()`` creates instances.

    Attributes:
        method: Upper-cased HTTP method ("" when absent)
        host: Host name from the raw request, if any
        port: Port as text, None when absent
        path: Request path without query string ("/" when absent)
        query: Sorted (name, value) query pairs
        header_items: Sorted (lower-cased name, value) header pairs
        body: Request body bytes
    """
    method: str
    host: Optional[str]
    port: Optional[str]
    path: str
    query: QueryItems
    header_items: HeaderItems
    body: bytes

    @property
    def headers(self) -> Mapping:
        """Read-only header mapping iterating in alphabetical key order"""
        return MappingProxyType(dict(self.header_items))

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup"""
        target = name.lower()
        for key, value in self.header_items:
            if key == target:
                return value
        return default


def normalize(raw_request: RawRequest) -> Optional[NormalizedRequest]:
    """
    Normalize a request-ish value.

    Args:
        raw_request: Mapping or object with any of the fields method, host,
            port, path, query, headers, body

    Returns:
        NormalizedRequest, or None when the input cannot be normalized
    """
    if isinstance(raw_request, NormalizedRequest):
        return raw_request

    fields = _read_fields(raw_request)
    if fields is None:
        logger.debug(f"Cannot normalize request of type {type(raw_request).__name__}")
        return None

    try:
        method = _coerce_optional_text(fields['method'], 'method')
        host = _coerce_optional_text(fields['host'], 'host')
        port = _coerce_port(fields['port'])
        path, path_query = _split_path(_coerce_optional_text(fields['path'], 'path'))
        query = _coerce_query(fields['query']) + path_query
        headers = _coerce_headers(fields['headers'])
        body = _coerce_body(fields['body'])
    except _Rejected as e:
        logger.debug(f"Rejected request during normalization: {e}")
        return None

    if 'host' not in headers and host:
        headers['host'] = f"{host}:{port}" if port else host

    return NormalizedRequest(
        method=(method or '').upper(),
        host=host,
        port=port,
        path=path,
        query=tuple(sorted(query)),
        header_items=tuple(sorted(headers.items())),
        body=body,
    )


def _read_fields(raw_request: Any) -> Optional[Dict[str, Any]]:
    if raw_request is None or isinstance(raw_request, (str, bytes, bytearray, memoryview, int, float)):
        return None

    if isinstance(raw_request, Mapping):
        return {name: raw_request.get(name) for name in REQUEST_FIELDS}

    if isinstance(raw_request, (Sequence, Set)):
        return None

    if not any(hasattr(raw_request, name) for name in REQUEST_FIELDS):
        return None

    return {name: getattr(raw_request, name, None) for name in REQUEST_FIELDS}


def _check_single_line(value: str, what: str) -> str:
    # CR and LF separate the lines of the canonical string
    if '\r' in value or '\n' in value:
        raise _Rejected(f"{what} contains a line break")
    return value


def _coerce_optional_text(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise _Rejected(f"{field_name} must be a string, got {type(value).__name__}")
    return _check_single_line(value, field_name)


def _coerce_scalar(value: Any, what: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise _Rejected(f"{what} must be a string, got {type(value).__name__}")


def _coerce_port(value: Any) -> Optional[str]:
    if value is None:
        return None
    port = _coerce_scalar(value, 'port')
    if not value:
        return None
    return _check_single_line(port, 'port')


def _split_path(path: Optional[str]) -> Tuple[str, List[Tuple[str, str]]]:
    if not path:
        return '/', []
    path, sep, query_string = path.partition('?')
    query = parse_qsl(query_string, keep_blank_values=True) if sep else []
    return path or '/', query


def _coerce_query(query: Any) -> List[Tuple[str, str]]:
    if query is None:
        return []

    if isinstance(query, str):
        return parse_qsl(query.lstrip('?'), keep_blank_values=True)

    pairs: List[Tuple[str, str]] = []
    if isinstance(query, Mapping):
        for name, value in query.items():
            name = _coerce_scalar(name, 'query parameter name')
            if isinstance(value, (list, tuple)):
                pairs.extend((name, _coerce_scalar(item, 'query value')) for item in value)
            elif value is None:
                pairs.append((name, ''))
            else:
                pairs.append((name, _coerce_scalar(value, 'query value')))
        return pairs

    if isinstance(query, (list, tuple)):
        for item in query:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise _Rejected("query sequence must contain (name, value) pairs")
            pairs.append((_coerce_scalar(item[0], 'query parameter name'),
                          _coerce_scalar(item[1], 'query value')))
        return pairs

    raise _Rejected(f"query must be a string, mapping or pair sequence, got {type(query).__name__}")


def _coerce_headers(headers: Any) -> Dict[str, str]:
    if headers is None:
        return {}
    if not isinstance(headers, Mapping):
        raise _Rejected(f"headers must be a mapping, got {type(headers).__name__}")

    normalized: Dict[str, str] = {}
    for name, value in headers.items():
        if not isinstance(name, str) or not name:
            raise _Rejected(f"header names must be non-empty strings, got {name!r}")
        key = _check_single_line(name.lower(), 'header name')
        value = _check_single_line(_coerce_scalar(value, f"header {key}"), f"header {key}")
        if key in normalized and normalized[key] != value:
            raise _Rejected(f"conflicting values for header {key}")
        normalized[key] = value
    return normalized


def _coerce_body(body: Any) -> bytes:
    if body is None:
        return b''
    if isinstance(body, str):
        return body.encode(TEXT_ENCODING)
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    raise _Rejected(f"body must be bytes or text, got {type(body).__name__}")
