"""Mapping of classification results to RGB colours."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
from matplotlib import colormaps
from matplotlib.colors import hsv_to_rgb

IN_SET_COLOR = (0, 0, 0)
DEFAULT_BRIGHTNESS = 2.0
DEFAULT_CONTRAST = 1.5
WARP_EXPONENT = 0.5

_HEX_COLOR = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


class ColorScheme(str, Enum):
    RAINBOW = "rainbow"
    GRAYSCALE = "grayscale"
    CUSTOM = "custom"
    COLORMAP = "colormap"

    @classmethod
    def parse(cls, name: str) -> "ColorScheme":
        normalized = str(name).strip().lower()
        for scheme in cls:
            if scheme.value == normalized:
                return scheme
        raise ValueError(f"Unknown colour scheme '{name}'. Valid choices: {', '.join(s.value for s in cls)}.")


def parse_hex_color(value: Optional[str]) -> Optional[tuple[int, int, int]]:
    """Parse ``#RRGGBB`` (case-insensitive, ``#`` optional) or return ``None``."""

    if not isinstance(value, str):
        return None
    match = _HEX_COLOR.match(value.strip())
    if match is None:
        return None
    return tuple(int(group, 16) for group in match.groups())


def _as_uint8(channels: np.ndarray) -> np.ndarray:
    return np.floor(np.clip(channels, 0.0, 255.0)).astype(np.uint8)


@dataclass(frozen=True)
class ColorMapper:
    """Colour iteration counts under a configurable scheme.

    Points that exhaust the iteration budget are always black. Everything else
    is coloured from ``t = iterations / max_iterations``:

    * ``rainbow`` sweeps the hue once around the colour wheel.
    * ``grayscale`` is a linear ramp from black to white.
    * ``custom`` interpolates between ``primary`` and ``secondary`` at
      ``sqrt(t)``, then applies ``brightness`` and ``contrast``. A malformed hex
      colour degrades to the grayscale ramp.
    * ``colormap`` samples the named matplotlib colormap.
    """

    scheme: ColorScheme = ColorScheme.RAINBOW
    primary: str = "#ff0000"
    secondary: str = "#0000ff"
    colormap: str = "twilight_shifted"
    brightness: float = DEFAULT_BRIGHTNESS
    contrast: float = DEFAULT_CONTRAST

    def __post_init__(self) -> None:
        if not isinstance(self.scheme, ColorScheme):
            object.__setattr__(self, "scheme", ColorScheme.parse(self.scheme))

    @property
    def custom_colors(self) -> Optional[tuple[tuple[int, int, int], tuple[int, int, int]]]:
        primary = parse_hex_color(self.primary)
        secondary = parse_hex_color(self.secondary)
        if primary is None or secondary is None:
            return None
        return primary, secondary

    def colorize(self, iterations: np.ndarray, max_iterations: int) -> np.ndarray:
        """Vectorised colouring: returns a ``uint8`` array of shape ``iterations.shape + (3,)``."""

        ns = np.asarray(iterations)
        inside = ns >= max_iterations
        t = ns.astype(np.float64) / float(max(max_iterations, 1))
        t = np.where(inside, 0.0, np.clip(t, 0.0, 1.0))

        rgb = self._escaped_colors(t)
        rgb[inside] = IN_SET_COLOR
        return rgb

    def color_of(self, iterations: int, max_iterations: int) -> tuple[int, int, int]:
        rgb = self.colorize(np.array([iterations]), max_iterations)[0]
        return tuple(int(channel) for channel in rgb)

    def painted_color(self) -> tuple[int, int, int]:
        """Colour used for painted pixels of the geometric kinds."""

        if self.scheme is ColorScheme.CUSTOM:
            colors = self.custom_colors
            return colors[0] if colors is not None else (255, 255, 255)
        if self.scheme is ColorScheme.RAINBOW:
            return (0, 255, 0)
        if self.scheme is ColorScheme.COLORMAP:
            rgba = colormaps[self.colormap](1.0)
            return tuple(int(channel) for channel in _as_uint8(np.asarray(rgba[:3]) * 255.0))
        return (255, 255, 255)

    def _escaped_colors(self, t: np.ndarray) -> np.ndarray:
        if self.scheme is ColorScheme.RAINBOW:
            hsv = np.stack((t, np.ones_like(t), np.ones_like(t)), axis=-1)
            return _as_uint8(hsv_to_rgb(hsv) * 255.0)

        if self.scheme is ColorScheme.COLORMAP:
            rgba = colormaps[self.colormap](t)
            return _as_uint8(np.asarray(rgba)[..., :3] * 255.0)

        if self.scheme is ColorScheme.CUSTOM:
            colors = self.custom_colors
            if colors is not None:
                primary = np.array(colors[0], dtype=np.float64)
                secondary = np.array(colors[1], dtype=np.float64)
                warped = (t ** WARP_EXPONENT)[..., np.newaxis]
                mixed = primary * (1.0 - warped) + secondary * warped
                mixed = mixed * self.brightness
                mixed = (mixed - 128.0) * self.contrast + 128.0
                return _as_uint8(mixed)

        gray = t[..., np.newaxis] * 255.0
        return _as_uint8(np.repeat(gray, 3, axis=-1))
