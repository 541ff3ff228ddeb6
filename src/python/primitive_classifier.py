"""Resolves EasyEDA source tags to canonical enums.

Every table is total over the values the source is known to emit. A value
outside a table raises UnsupportedPrimitive carrying the fallback; a missing
value (None or empty) gets the documented default without a warning.
"""

import logging
from typing import Callable, Optional, TypeVar

from errors import UnsupportedPrimitive
from models import PadLayer, PadShape, PinElectrical, PinOrientation

logger = logging.getLogger(__name__)

T = TypeVar("T")

# EasyEDA writes both numeric codes (schematic editor) and KiCad-style
# letters (imported parts) for the pin electrical type.
_PIN_ELECTRICAL = {
    "1": PinElectrical.INPUT,
    "I": PinElectrical.INPUT,
    "2": PinElectrical.OUTPUT,
    "O": PinElectrical.OUTPUT,
    "3": PinElectrical.IO,
    "B": PinElectrical.IO,
    "4": PinElectrical.POWER,
    "W": PinElectrical.POWER,
    "w": PinElectrical.POWER,
    "P": PinElectrical.PASSIVE,
    "C": PinElectrical.OPEN_COLLECTOR,
    "E": PinElectrical.OPEN_EMITTER,
    "T": PinElectrical.HIZ,
    "Z": PinElectrical.HIZ,
}

# "0" and "U" are the source's own "undefined" markers.
_PIN_ELECTRICAL_UNSPECIFIED = {"", "0", "U"}

_PIN_ORIENTATION = {
    0: PinOrientation.RIGHT,
    90: PinOrientation.UP,
    180: PinOrientation.LEFT,
    270: PinOrientation.DOWN,
}

_PAD_SHAPE = {
    "RECT": PadShape.RECTANGLE,
    "ELLIPSE": PadShape.ROUND,
    "OVAL": PadShape.ROUND,
    "ROUND": PadShape.ROUND,
    "OCTAGON": PadShape.OCTAGONAL,
    "ROUNDRECT": PadShape.ROUND_RECT,
}

_PAD_LAYER = {
    "1": PadLayer.TOP,
    "2": PadLayer.BOTTOM,
    "11": PadLayer.MULTI_LAYER,
}


def resolve_pin_electrical(tag: Optional[str]) -> PinElectrical:
    """Map a pin's electrical tag; omitted means Passive."""
    if tag is None or tag.strip() in _PIN_ELECTRICAL_UNSPECIFIED:
        return PinElectrical.PASSIVE
    kind = _PIN_ELECTRICAL.get(tag.strip())
    if kind is None:
        raise UnsupportedPrimitive("pin electrical type", tag, PinElectrical.PASSIVE)
    return kind


def resolve_pin_orientation(rotation: Optional[float]) -> PinOrientation:
    """Map a pin rotation in degrees; omitted means Right."""
    if rotation is None:
        return PinOrientation.RIGHT
    normalized = rotation % 360
    if normalized != int(normalized) or int(normalized) not in _PIN_ORIENTATION:
        raise UnsupportedPrimitive("pin rotation", rotation, PinOrientation.RIGHT)
    return _PIN_ORIENTATION[int(normalized)]


def resolve_pad_shape(tag: Optional[str]) -> PadShape:
    """Map a pad shape tag; anything unknown (polygons included) is unsupported."""
    shape = _PAD_SHAPE.get((tag or "").strip().upper())
    if shape is None:
        raise UnsupportedPrimitive("pad shape", tag, PadShape.ROUND)
    return shape


def default_pad_layer(hole_diameter: float) -> PadLayer:
    """Through-hole pads span all layers, surface pads sit on top."""
    return PadLayer.MULTI_LAYER if hole_diameter > 0 else PadLayer.TOP


def resolve_pad_layer(tag: Optional[str], hole_diameter: float) -> PadLayer:
    """Map a pad layer id; omitted means the default for the hole size."""
    if tag is None or not tag.strip():
        return default_pad_layer(hole_diameter)
    layer = _PAD_LAYER.get(tag.strip())
    if layer is None:
        raise UnsupportedPrimitive("pad layer", tag, default_pad_layer(hole_diameter))
    return layer


def lookup(table: dict, tag: Optional[str], category: str, fallback):
    """Look a tag up in a target-specific table, raising for unknown tags."""
    key = (tag or "").strip()
    if key not in table:
        raise UnsupportedPrimitive(category, tag, fallback)
    return table[key]


def resolve_or_fallback(resolver: Callable[..., T], *args, warnings: list[str]) -> T:
    """Call a resolver, recovering UnsupportedPrimitive with its fallback.

    The warning is logged and appended to ``warnings``.
    """
    try:
        return resolver(*args)
    except UnsupportedPrimitive as exc:
        logger.warning("%s", exc)
        warnings.append(str(exc))
        return exc.fallback
