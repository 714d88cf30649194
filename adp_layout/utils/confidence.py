import logging
from typing import Optional, Union

from adp_layout.datamodels.types import KeyClassTier

_log = logging.getLogger(__name__)


def char_confidence(digits: Optional[str]) -> int:
    """Aggregate a per-character OCR confidence string into a 0-100 score.

    Each character is one of the analyzer's 0-9 confidence digits, where 9
    stands for 100%. Every non-zero digit is therefore bumped by one before
    averaging. Characters that are not digits add nothing but still count
    towards the length.
    """
    if not digits:
        return 0
    total = 0
    for char in digits:
        if char not in "0123456789":
            continue
        digit = int(char)
        total += digit
        if digit != 0:
            total += 1
    return (total * 10) // len(digits)


def value_confidence(value: int) -> int:
    """Map a 0-9 value confidence to a 0-100 score."""
    return (value + 1) * 10


def tier_from_confidence(
    confidence: Union[str, int, float, None],
) -> Optional[str]:
    """Normalize a key class confidence into a tier name.

    Strings are used as they are (an empty string means Low); numbers are
    bucketed at 80 and 60. Anything else leaves the tier unset.
    """
    if confidence is None:
        return None
    if isinstance(confidence, str):
        return confidence if len(confidence) > 0 else KeyClassTier.LOW.value
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
        return KeyClassTier.from_score(confidence).value
    _log.debug(f"Unsupported key class confidence {confidence!r}")
    return None


def rebucket_numeric_tier(tier: Optional[str]) -> Optional[str]:
    """Bucket a tier that turns out to be a number serialized as a string."""
    if tier is None:
        return None
    text = tier.strip()
    try:
        return KeyClassTier.from_score(int(text)).value
    except ValueError:
        pass
    try:
        return KeyClassTier.from_score(float(text)).value
    except ValueError:
        return tier
