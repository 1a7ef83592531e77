"""
Numeric option conversion with user-facing diagnostics
"""
import re
from typing import Union

from .constants import MAX_PORT
from .exceptions import ConversionError

_DIGITS = re.compile(r"[+-]?[0-9]+")


def _parse_integer(text: Union[str, int]) -> int:
    """
    Parse a base-10 integer the way strtol would, but strictly.

    Leading whitespace and an optional sign are accepted; anything after the
    digits is rejected.

    Raises:
        ConversionError: If no digits are present or trailing input remains
    """
    if isinstance(text, bool):
        raise ConversionError(str(text), "not a decimal number")
    if isinstance(text, int):
        return text

    stripped = str(text).lstrip()
    match = _DIGITS.match(stripped)
    if match is None:
        raise ConversionError(text, "not a decimal number")
    if match.end() != len(stripped):
        raise ConversionError(text, "extra characters at end of input")
    return int(match.group())


def parse_port(text: Union[str, int]) -> int:
    """
    Convert a port string into a TCP port number.

    Args:
        text: Decimal port string (or an already-parsed int)

    Returns:
        Port in the range 0..65535

    Raises:
        ConversionError: With one of the diagnostics "not a decimal number",
            "extra characters at end of input", "greater than 65535",
            "less than 0"
    """
    value = _parse_integer(text)
    if value > MAX_PORT:
        raise ConversionError(str(text), f"greater than {MAX_PORT}")
    if value < 0:
        raise ConversionError(str(text), "less than 0")
    return value


def parse_size(text: Union[str, int]) -> int:
    """
    Convert a buffer size string into a positive byte count.

    Raises:
        ConversionError: If the value is not a decimal number or is not positive
    """
    value = _parse_integer(text)
    if value < 0:
        raise ConversionError(str(text), "less than 0")
    if value == 0:
        raise ConversionError(str(text), "must be greater than 0")
    return value
