"""
Value normalization for embedded metadata tags.
Turns raw tag values (absent, scalar or list) into display-safe strings.
"""
import math
from dataclasses import dataclass
from typing import Any, Optional, Union, List

MISSING = '-'

Scalar = Union[str, int, float]


@dataclass
class Tag:
    """A loaded metadata tag. `value` is a scalar or an ordered list of scalars."""
    value: Optional[Union[Scalar, List[Scalar]]] = None


def first_value(values: list) -> Any:
    """First element of a list-valued tag, None for an empty list."""
    return values[0] if values else None


def normalize_scalar(value: Any) -> str:
    """
    Normalize a single scalar value.

    - strings: NUL characters become spaces, then the result is trimmed;
      an empty result is '-'
    - numbers: zero (and NaN) is '0', anything else its decimal form
    - anything else: '-'
    """
    if isinstance(value, str):
        return value.replace('\x00', ' ').strip() or MISSING

    if isinstance(value, bool):
        return MISSING

    if isinstance(value, (int, float)):
        if not value or (isinstance(value, float) and math.isnan(value)):
            return '0'
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    return MISSING


def normalize_tag_value(tag: Optional[Tag]) -> str:
    """
    Normalize a tag into a display string. Never raises.

    Only the first element of a list value is used.

    Args:
        tag: The tag, or None when the file doesn't carry it

    Returns:
        The normalized string, '-' when nothing usable is present
    """
    if tag is None:
        return MISSING

    value = getattr(tag, 'value', None)
    if isinstance(value, (list, tuple)):
        return normalize_scalar(first_value(value))
    return normalize_scalar(value)
