from __future__ import annotations

import re
from typing import Any, Optional

from .db import Lane
from .errors import ClientError, ErrorKind

ID_PATTERN = re.compile(r"-?[0-9]+")

# Widest value an INTEGER column can hold.
MAX_ID = 2**63 - 1


def parse_id(raw: Any) -> int:
    """Parse a path id, rejecting anything that is not a plain integer.

    Ids outside the store's integer range cannot name a client and are
    reported as not found.
    """
    if isinstance(raw, bool):
        raise ClientError(ErrorKind.INVALID_ID)
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and ID_PATTERN.fullmatch(raw):
        value = int(raw, 10)
    else:
        raise ClientError(ErrorKind.INVALID_ID)
    if not -MAX_ID - 1 <= value <= MAX_ID:
        raise ClientError(ErrorKind.NOT_FOUND)
    return value


def parse_status(raw: Optional[str]) -> Optional[Lane]:
    # Empty values mean "no filter" / "keep the current lane".
    if not raw:
        return None
    try:
        return Lane(raw)
    except ValueError:
        raise ClientError(ErrorKind.INVALID_STATUS) from None


def parse_priority(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ClientError(ErrorKind.INVALID_PRIORITY)
    return raw
