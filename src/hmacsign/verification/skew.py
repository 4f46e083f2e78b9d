"""
Clock skew validation for replay protection

A signed request carries its creation time in the ``date`` header. The
verifier only accepts requests whose date lies within the configured window
around its own clock.
"""

import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional, Union

from ..config.settings import HmacConfig
from ..signing.normalizer import NormalizedRequest, normalize
from ..signing.types import RawRequest

logger = logging.getLogger(__name__)

DATE_HEADER = 'date'

Clock = Callable[[], float]


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a request date.

    Accepts HTTP dates (RFC 1123/RFC 2822, e.g. ``Mon, 30 Jul 2012 14:40:30 GMT``)
    and ISO 8601 timestamps. Values without a zone are taken as UTC.

    Args:
        value: Header value

    Returns:
        datetime: Timezone-aware datetime, or None if unparseable
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError, OverflowError):
        parsed = None

    if parsed is None:
        iso_text = text[:-1] + '+00:00' if text[-1] in 'zZ' else text
        try:
            parsed = datetime.fromisoformat(iso_text)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SkewValidator:
    """
    Checks request dates against the local clock.

    Attributes:
        config: Signing configuration providing acceptable_date_skew
        clock: Callable returning the current Unix time
    """

    def __init__(self, config: Optional[HmacConfig] = None, clock: Clock = time.time):
        self.config = config or HmacConfig()
        self.clock = clock

    def check_skew(self, request: Union[NormalizedRequest, RawRequest, None]) -> bool:
        """
        Check that the request date is within the acceptable skew.

        Always True when skew checking is disabled. Otherwise False for a
        missing request, a missing or unparseable date, or a date further
        than ``acceptable_date_skew`` seconds from now (the boundary is
        accepted).

        Args:
            request: Normalized request (raw requests are normalized first)

        Returns:
            bool: True if the request passes the skew check
        """
        if not self.config.skew_enabled:
            return True

        if not isinstance(request, NormalizedRequest):
            request = normalize(request)
            if request is None:
                return False

        header = request.get_header(DATE_HEADER)
        if header is None:
            logger.debug("Request has no date header")
            return False

        parsed = parse_http_date(header)
        if parsed is None:
            logger.debug(f"Unparseable date header: {header!r}")
            return False

        skew = abs(self.clock() - parsed.timestamp())
        if skew > self.config.acceptable_date_skew:
            logger.debug(f"Request date is {skew:.0f}s from local time (limit {self.config.acceptable_date_skew}s)")
            return False
        return True


def check_skew(request: Union[NormalizedRequest, RawRequest, None],
               config: Optional[HmacConfig] = None) -> bool:
    """Check request date skew with the given configuration"""
    return SkewValidator(config).check_skew(request)
