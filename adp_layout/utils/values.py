import logging
from typing import Optional, Union

_log = logging.getLogger(__name__)


def coerce_int(
    value: Union[str, int, float, None], context: Optional[str] = None
) -> int:
    """Best-effort integer conversion; -1 when the value is not a finite number."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        if isinstance(value, float):
            return int(value)
        try:
            return int(str(value).strip())
        except ValueError:
            return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        if context is not None:
            _log.debug(f"Unassignable value for {context}: {value!r}")
        _log.debug(f"Could not convert {value!r} to an integer")
        return -1


def parse_font_size(value: Optional[str]) -> int:
    """Parse a word font size, 0 when it is missing or not an integer."""
    if value is None:
        return 0
    try:
        return int(value.strip())
    except ValueError:
        return 0
