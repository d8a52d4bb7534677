"""Colour parsing: 0-255 channel values at the interface, 0-1 floats for PyMuPDF."""
from __future__ import annotations

from typing import Sequence, Tuple, Union

from document.errors import InvalidParameter

ColorInput = Union[str, Sequence[float]]
UnitRGB = Tuple[float, float, float]

BLACK: UnitRGB = (0.0, 0.0, 0.0)


def parse_color(value: ColorInput | None, default: UnitRGB = BLACK) -> UnitRGB:
    """
    Parse a colour given as ``"r,g,b"`` or a 3-sequence of 0-255 channels.

    Returns:
        Channels normalized to [0.0, 1.0]

    Raises:
        InvalidParameter: on wrong arity, non-numeric or out-of-range channels
    """
    if value is None:
        return default
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",")]
    else:
        parts = list(value)
    if len(parts) != 3:
        raise InvalidParameter(f"Colour must have 3 channels, got {value!r}")
    try:
        channels = [float(p) for p in parts]
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(f"Colour channels must be numeric, got {value!r}") from exc
    for channel in channels:
        if not 0.0 <= channel <= 255.0:
            raise InvalidParameter(f"Colour channels must be within 0-255, got {value!r}")
    r, g, b = (c / 255.0 for c in channels)
    return (r, g, b)
