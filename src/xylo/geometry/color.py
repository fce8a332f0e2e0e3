"""
Four-channel colors, stored as straight-alpha floats in 0..1.
"""

import colorsys
from dataclasses import dataclass

from ..utils.config import DEFAULT_COLOR_RGBA


def _unit(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class Color:
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    @classmethod
    def from_bytes(cls, red, green, blue, alpha=255) -> "Color":
        """Channels in 0..255."""
        return cls(_unit(red / 255.0), _unit(green / 255.0), _unit(blue / 255.0), _unit(alpha / 255.0))

    @classmethod
    def from_hsl(cls, hue: float, saturation: float, lightness: float, alpha: float = 1.0) -> "Color":
        """Hue in degrees (wraps), saturation/lightness/alpha in 0..1."""
        h = (float(hue) % 360.0) / 360.0
        red, green, blue = colorsys.hls_to_rgb(h, _unit(lightness), _unit(saturation))
        return cls(_unit(red), _unit(green), _unit(blue), _unit(alpha))

    def to_hsl(self):
        """(hue in degrees, saturation, lightness)."""
        h, l, s = colorsys.rgb_to_hls(self.red, self.green, self.blue)
        return h * 360.0, s, l

    def with_alpha(self, alpha: float) -> "Color":
        return Color(self.red, self.green, self.blue, _unit(alpha))

    def to_bytes(self):
        return tuple(int(round(channel * 255.0)) for channel in (self.red, self.green, self.blue, self.alpha))

    def __str__(self) -> str:
        return "#{:02x}{:02x}{:02x}{:02x}".format(*self.to_bytes())


WHITE = Color(*DEFAULT_COLOR_RGBA)
BLACK = Color(0.0, 0.0, 0.0, 1.0)
