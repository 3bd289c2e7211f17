"""Colour utilities for report configuration."""
from __future__ import annotations

import re
from typing import Tuple

_HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGB_COLOR_RE = re.compile(r"^(rgba?)\(([^)]+)\)$")

RGB = Tuple[float, float, float]


def parse_color(value: str) -> Tuple[float, float, float, float]:
    """Parse a color value into normalized RGBA (0..1) tuple.

    Supported formats:
    - #RGB, #RRGGBB, #RRGGBBAA
    - rgb(r,g,b)
    - rgba(r,g,b,a) where alpha is 0..1
    - transparent
    """
    if value is None:
        raise ValueError("Color ausente.")
    value = value.strip()
    if not value:
        raise ValueError("Color vacío.")

    lower = value.lower()
    if lower == "transparent":
        return (0.0, 0.0, 0.0, 0.0)

    match = _HEX_COLOR_RE.match(value)
    if match:
        hex_value = match.group(1)
        if len(hex_value) == 3:
            hex_value = "".join(char * 2 for char in hex_value)
        r = int(hex_value[0:2], 16)
        g = int(hex_value[2:4], 16)
        b = int(hex_value[4:6], 16)
        a = int(hex_value[6:8], 16) if len(hex_value) == 8 else 255
        return (r / 255, g / 255, b / 255, a / 255)

    match = _RGB_COLOR_RE.match(lower)
    if match:
        mode = match.group(1)
        parts = [part.strip() for part in match.group(2).split(",")]
        if mode == "rgb" and len(parts) != 3:
            raise ValueError("Formato rgb inválido.")
        if mode == "rgba" and len(parts) != 4:
            raise ValueError("Formato rgba inválido.")
        try:
            r = float(parts[0])
            g = float(parts[1])
            b = float(parts[2])
        except ValueError as exc:
            raise ValueError("Componentes RGB inválidos.") from exc
        if not (0 <= r <= 255 and 0 <= g <= 255 and 0 <= b <= 255):
            raise ValueError("Componentes RGB fuera de rango (0-255).")
        a = 1.0
        if mode == "rgba":
            try:
                a = float(parts[3])
            except ValueError as exc:
                raise ValueError("Alfa inválido.") from exc
            if not (0 <= a <= 1):
                raise ValueError("Alfa fuera de rango (0-1).")
        return (r / 255, g / 255, b / 255, a)

    raise ValueError("Formato de color no soportado.")


PAPER: RGB = (255, 255, 255)


def to_rgb255(value: str, background: RGB = PAPER) -> RGB:
    """Convert a color string into a 0..255 RGB triple.

    Translucent colours are flattened over ``background`` (the white page by
    default), so ``transparent`` resolves to the background itself.
    """
    r, g, b, alpha = parse_color(value)
    return tuple(
        round(alpha * channel * 255 + (1 - alpha) * base)
        for channel, base in zip((r, g, b), background)
    )  # type: ignore[return-value]


def interpolate(start: RGB, end: RGB, ratio: float) -> RGB:
    return tuple(c0 + ratio * (c1 - c0) for c0, c1 in zip(start, end))  # type: ignore[return-value]
