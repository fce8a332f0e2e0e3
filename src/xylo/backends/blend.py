"""
Blend modes over premultiplied RGBA.

`blend(mode, source, backdrop)` returns what a fully covering source would
leave in the backdrop window. Partial coverage is applied by the canvas,
which interpolates between the backdrop and this result, so pixels outside
a primitive are never touched whatever the mode.

Porter-Duff operators weight source and backdrop by factors of the two
alphas. Separable modes mix straight colors channel by channel and
composite the mix source-over:

    co = cs * (1 - ab) + cb * (1 - as) + as * ab * B(Cs, Cb)
    ao = as + ab - as * ab
"""

from typing import Callable, Dict, Tuple, Union

import numpy as np

from ..shared.types import BlendMode

Factor = Callable[[float, np.ndarray], Union[float, np.ndarray]]

PORTER_DUFF: Dict[BlendMode, Tuple[Factor, Factor]] = {
    BlendMode.CLEAR: (lambda sa, da: 0.0, lambda sa, da: 0.0),
    BlendMode.SOURCE: (lambda sa, da: 1.0, lambda sa, da: 0.0),
    BlendMode.DESTINATION: (lambda sa, da: 0.0, lambda sa, da: 1.0),
    BlendMode.SOURCE_OVER: (lambda sa, da: 1.0, lambda sa, da: 1.0 - sa),
    BlendMode.DESTINATION_OVER: (lambda sa, da: 1.0 - da, lambda sa, da: 1.0),
    BlendMode.SOURCE_IN: (lambda sa, da: da, lambda sa, da: 0.0),
    BlendMode.DESTINATION_IN: (lambda sa, da: 0.0, lambda sa, da: sa),
    BlendMode.SOURCE_OUT: (lambda sa, da: 1.0 - da, lambda sa, da: 0.0),
    BlendMode.DESTINATION_OUT: (lambda sa, da: 0.0, lambda sa, da: 1.0 - sa),
    BlendMode.SOURCE_ATOP: (lambda sa, da: da, lambda sa, da: 1.0 - sa),
    BlendMode.DESTINATION_ATOP: (lambda sa, da: 1.0 - da, lambda sa, da: sa),
    BlendMode.XOR: (lambda sa, da: 1.0 - da, lambda sa, da: 1.0 - sa),
    BlendMode.PLUS: (lambda sa, da: 1.0, lambda sa, da: 1.0),
}


def _multiply(cs, cb):
    return cs * cb


def _screen(cs, cb):
    return cs + cb - cs * cb


def _hard_light(cs, cb):
    return np.where(cs <= 0.5, _multiply(cb, 2.0 * cs), _screen(cb, 2.0 * cs - 1.0))


def _overlay(cs, cb):
    return _hard_light(cb, cs)


def _color_dodge(cs, cb):
    with np.errstate(divide="ignore", invalid="ignore"):
        dodged = np.minimum(1.0, cb / (1.0 - cs))
    return np.where(cb <= 0.0, 0.0, np.where(cs >= 1.0, 1.0, dodged))


def _color_burn(cs, cb):
    with np.errstate(divide="ignore", invalid="ignore"):
        burned = 1.0 - np.minimum(1.0, (1.0 - cb) / cs)
    return np.where(cb >= 1.0, 1.0, np.where(cs <= 0.0, 0.0, burned))


def _soft_light(cs, cb):
    d = np.where(cb <= 0.25, ((16.0 * cb - 12.0) * cb + 4.0) * cb, np.sqrt(cb))
    return np.where(cs <= 0.5,
                    cb - (1.0 - 2.0 * cs) * cb * (1.0 - cb),
                    cb + (2.0 * cs - 1.0) * (d - cb))


SEPARABLE: Dict[BlendMode, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    BlendMode.MULTIPLY: _multiply,
    BlendMode.SCREEN: _screen,
    BlendMode.OVERLAY: _overlay,
    BlendMode.DARKEN: np.minimum,
    BlendMode.LIGHTEN: np.maximum,
    BlendMode.COLOR_DODGE: _color_dodge,
    BlendMode.COLOR_BURN: _color_burn,
    BlendMode.HARD_LIGHT: _hard_light,
    BlendMode.SOFT_LIGHT: _soft_light,
    BlendMode.DIFFERENCE: lambda cs, cb: np.abs(cs - cb),
    BlendMode.EXCLUSION: lambda cs, cb: cs + cb - 2.0 * cs * cb,
}

# modes in which a fully transparent source still changes the backdrop
CLEARING_MODES = frozenset({
    BlendMode.CLEAR, BlendMode.SOURCE, BlendMode.SOURCE_IN, BlendMode.DESTINATION_IN,
    BlendMode.SOURCE_OUT, BlendMode.DESTINATION_ATOP,
})


def blend(mode: BlendMode, source: np.ndarray, backdrop: np.ndarray) -> np.ndarray:
    """
    `source` is one premultiplied RGBA color, `backdrop` a premultiplied
    (rows, cols, 4) window. Returns a new (rows, cols, 4) array.
    """
    sa = float(source[3])
    da = backdrop[..., 3:4]
    if mode in PORTER_DUFF:
        source_factor, backdrop_factor = PORTER_DUFF[mode]
        result = source * source_factor(sa, da) + backdrop * backdrop_factor(sa, da)
        if mode is BlendMode.PLUS:
            np.minimum(result, 1.0, out=result)
        return result

    mix = SEPARABLE[mode]
    with np.errstate(divide="ignore", invalid="ignore"):
        cs = source[:3] / sa if sa > 0.0 else np.zeros(3)
        cb = np.where(da > 0.0, backdrop[..., :3] / da, 0.0)
    cs = np.broadcast_to(cs, cb.shape)
    rgb = source[:3] * (1.0 - da) + backdrop[..., :3] * (1.0 - sa) + sa * da * mix(cs, cb)
    alpha = sa + da - sa * da
    return np.concatenate((rgb, alpha), axis=-1)
