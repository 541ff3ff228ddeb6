"""Maps canonical components to Altium SchLib/PcbLib structures.

Schematic values are whole mils, PCB values are mils at 0.01 resolution.
Every enumeration is resolved to its Altium code here, so the exporter only
prints values.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from config import ConverterConfig
from models import (
    Footprint, PadLayer, PadShape, PinElectrical, PinOrientation, Symbol,
)
from normalizer import (
    Mil, footprint_placement, mil_from_grid, mil_from_mm, quantize_mil,
    schematic_mil, symbol_placement,
)
from primitive_classifier import (
    lookup, resolve_or_fallback, resolve_pad_layer, resolve_pad_shape,
    resolve_pin_electrical, resolve_pin_orientation,
)

logger = logging.getLogger(__name__)

ELECTRICAL_CODES = {
    PinElectrical.INPUT: 0,
    PinElectrical.IO: 1,
    PinElectrical.OUTPUT: 2,
    PinElectrical.OPEN_COLLECTOR: 3,
    PinElectrical.PASSIVE: 4,
    PinElectrical.HIZ: 5,
    PinElectrical.OPEN_EMITTER: 6,
    PinElectrical.POWER: 7,
}

ORIENTATION_CODES = {
    PinOrientation.RIGHT: 0,
    PinOrientation.UP: 1,
    PinOrientation.LEFT: 2,
    PinOrientation.DOWN: 3,
}

SHAPE_CODES = {
    PadShape.ROUND: 0,
    PadShape.RECTANGLE: 1,
    PadShape.OCTAGONAL: 2,
    PadShape.ROUND_RECT: 3,
}

PAD_LAYER_NAMES = {
    PadLayer.TOP: "TOP",
    PadLayer.BOTTOM: "BOTTOM",
    PadLayer.MULTI_LAYER: "MULTILAYER",
}

# EasyEDA layer id -> Altium layer for lines, arcs and text.
GRAPHIC_LAYERS = {
    "1": "TOP",
    "2": "BOTTOM",
    "3": "TOPOVERLAY",
    "4": "BOTTOMOVERLAY",
    "5": "TOPPASTE",
    "6": "BOTTOMPASTE",
    "7": "TOPSOLDER",
    "8": "BOTTOMSOLDER",
    "10": "MECHANICAL1",
    "11": "MULTILAYER",
    "12": "MECHANICAL2",
    "13": "MECHANICAL13",
    "14": "MECHANICAL14",
    "15": "MECHANICAL15",
    "99": "MECHANICAL13",
    "100": "MECHANICAL13",
    "101": "TOPOVERLAY",
}
DEFAULT_GRAPHIC_LAYER = "TOPOVERLAY"

# Namespace for deterministic 3D model identifiers.
MODEL_ID_NAMESPACE = uuid.UUID("6f1c2d8e-4b7a-5e3f-9a0d-2c6b8e1f4a73")

BODY_COLOR = 0x000000


# ── Target structures ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AltiumPin:
    x: int
    y: int
    length: int
    name: str
    designator: str
    electrical: int
    orientation: int


@dataclass(frozen=True)
class AltiumRectangle:
    x1: int
    y1: int
    x2: int
    y2: int
    color: int
    filled: bool
    line_width: int = 1


@dataclass(frozen=True)
class AltiumLine:
    x1: int
    y1: int
    x2: int
    y2: int
    color: int
    line_width: int = 1


@dataclass(frozen=True)
class AltiumLabel:
    x: int
    y: int
    text: str
    orientation: int
    color: int


@dataclass(frozen=True)
class AltiumSymbol:
    libref: str
    description: str
    pins: tuple[AltiumPin, ...]
    rectangles: tuple[AltiumRectangle, ...]
    lines: tuple[AltiumLine, ...]
    labels: tuple[AltiumLabel, ...]


@dataclass(frozen=True)
class AltiumPad:
    name: str
    x: Mil
    y: Mil
    x_size: Mil
    y_size: Mil
    hole_size: Mil
    shape: int
    layer: str
    plated: bool
    rotation: float = 0.0


@dataclass(frozen=True)
class AltiumTrack:
    layer: str
    x1: Mil
    y1: Mil
    x2: Mil
    y2: Mil
    width: Mil


@dataclass(frozen=True)
class AltiumArc:
    layer: str
    x: Mil
    y: Mil
    radius: Mil
    start_angle: float
    end_angle: float
    width: Mil


@dataclass(frozen=True)
class AltiumText:
    layer: str
    x: Mil
    y: Mil
    text: str
    height: Mil
    width: Mil
    rotation: float


@dataclass(frozen=True)
class AltiumModel:
    name: str
    model_id: str
    rotation: tuple[float, float, float]
    z: Mil


@dataclass(frozen=True)
class AltiumFootprint:
    name: str
    description: str
    pads: tuple[AltiumPad, ...]
    tracks: tuple[AltiumTrack, ...]
    arcs: tuple[AltiumArc, ...]
    texts: tuple[AltiumText, ...]
    model: Optional[AltiumModel] = None


# ── Helpers ──────────────────────────────────────────────────────────────────

def altium_color(rgb: Optional[int], default: int = BODY_COLOR) -> int:
    """RGB integer to Altium's BGR colour integer."""
    if rgb is None:
        rgb = default
    r, g, b = (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF
    return r + (g << 8) + (b << 16)


def model_id(identity: str, filename: str) -> str:
    """Stable braced GUID for a component's 3D model."""
    return "{" + str(uuid.uuid5(MODEL_ID_NAMESPACE, f"{identity}/{filename}")).upper() + "}"


def _label_orientation(rotation: float) -> int:
    return int(round((rotation % 360) / 90)) % 4


def _default_body(pins: list[AltiumPin], padding: int) -> AltiumRectangle:
    if not pins:
        return AltiumRectangle(-100, -200, 100, 200, BODY_COLOR, False)
    xs = [p.x for p in pins]
    ys = [p.y for p in pins]
    return AltiumRectangle(min(xs) - padding, min(ys) - padding,
                           max(xs) + padding, max(ys) + padding,
                           BODY_COLOR, False)


# ── Converters ───────────────────────────────────────────────────────────────

def convert_symbol(symbol: Symbol, config: ConverterConfig) -> tuple[AltiumSymbol, list[str]]:
    """Convert a canonical symbol. Returns the SchLib structure and warnings."""
    warnings: list[str] = []
    placement = symbol_placement(symbol, config.anchor)
    unit = config.symbol_unit_mil

    def point(x: float, y: float) -> tuple[int, int]:
        sx, sy = placement.shift(x, y)
        return schematic_mil(mil_from_grid(sx, unit)), schematic_mil(mil_from_grid(sy, unit))

    pins = []
    for pin in symbol.pins:
        x, y = point(pin.x, pin.y)
        if pin.length is None:
            length = config.default_pin_length_mil
        else:
            length = schematic_mil(mil_from_grid(pin.length, unit))
        electrical = resolve_or_fallback(resolve_pin_electrical, pin.electrical, warnings=warnings)
        orientation = resolve_or_fallback(resolve_pin_orientation, pin.rotation, warnings=warnings)
        pins.append(AltiumPin(
            x=x, y=y, length=length, name=pin.name, designator=pin.designator,
            electrical=ELECTRICAL_CODES[electrical],
            orientation=ORIENTATION_CODES[orientation],
        ))

    rectangles = []
    for rect in symbol.rectangles:
        x1, y1 = point(rect.x, rect.y)
        x2, y2 = point(rect.x + rect.width, rect.y + rect.height)
        rectangles.append(AltiumRectangle(x1, y1, x2, y2, altium_color(rect.color), rect.filled))
    if not rectangles and config.add_default_body:
        rectangles.append(_default_body(pins, config.default_body_padding_mil))

    lines = []
    for ln in symbol.lines:
        x1, y1 = point(ln.x1, ln.y1)
        x2, y2 = point(ln.x2, ln.y2)
        lines.append(AltiumLine(x1, y1, x2, y2, altium_color(ln.color)))

    labels = []
    for text in symbol.texts:
        x, y = point(text.x, text.y)
        labels.append(AltiumLabel(x, y, text.text, _label_orientation(text.rotation),
                                  altium_color(text.color)))

    skipped = [("circle", len(symbol.circles)), ("arc", len(symbol.arcs))]
    for kind, count in skipped:
        if count:
            message = f"SchLib has no {kind} record, skipped {count} symbol {kind}(s)"
            logger.warning("%s", message)
            warnings.append(message)

    converted = AltiumSymbol(
        libref=symbol.name,
        description=symbol.description,
        pins=tuple(pins),
        rectangles=tuple(rectangles),
        lines=tuple(lines),
        labels=tuple(labels),
    )
    return converted, warnings


def convert_footprint(footprint: Footprint, identity: str,
                      config: ConverterConfig) -> tuple[AltiumFootprint, list[str]]:
    """Convert a canonical footprint. Returns the PcbLib structure and warnings."""
    warnings: list[str] = []
    placement = footprint_placement(footprint, config.anchor)
    unit = config.footprint_unit_mm

    def mil(value: float) -> Mil:
        return quantize_mil(mil_from_mm(value * unit))

    def point(x: float, y: float) -> tuple[Mil, Mil]:
        sx, sy = placement.shift(x, y)
        return mil(sx), mil(sy)

    def graphic_layer(tag: Optional[str]) -> str:
        if tag is None:
            return DEFAULT_GRAPHIC_LAYER
        return resolve_or_fallback(lookup, GRAPHIC_LAYERS, tag, "graphic layer",
                                   DEFAULT_GRAPHIC_LAYER, warnings=warnings)

    pads = []
    for pad in footprint.pads:
        x, y = point(pad.x, pad.y)
        shape = resolve_or_fallback(resolve_pad_shape, pad.shape, warnings=warnings)
        layer = resolve_or_fallback(resolve_pad_layer, pad.layer, pad.hole_diameter,
                                    warnings=warnings)
        pads.append(AltiumPad(
            name=pad.name,
            x=x,
            y=y,
            x_size=mil(pad.width),
            y_size=mil(pad.height),
            hole_size=mil(pad.hole_diameter),
            shape=SHAPE_CODES[shape],
            layer=PAD_LAYER_NAMES[layer],
            plated=pad.plated and pad.hole_diameter > 0,
            rotation=pad.rotation % 360,
        ))

    tracks = []
    for ln in footprint.lines:
        x1, y1 = point(ln.x1, ln.y1)
        x2, y2 = point(ln.x2, ln.y2)
        tracks.append(AltiumTrack(graphic_layer(ln.layer), x1, y1, x2, y2, mil(ln.width)))

    arcs = []
    for arc in footprint.arcs:
        x, y = point(arc.cx, arc.cy)
        arcs.append(AltiumArc(
            layer=graphic_layer(arc.layer),
            x=x,
            y=y,
            radius=mil(arc.radius),
            start_angle=arc.start_angle % 360,
            end_angle=arc.end_angle if arc.end_angle == 360 else arc.end_angle % 360,
            width=mil(arc.width),
        ))

    texts = []
    for text in footprint.texts:
        x, y = point(text.x, text.y)
        texts.append(AltiumText(
            layer=graphic_layer(text.layer),
            x=x,
            y=y,
            text=text.text,
            height=mil(text.height),
            width=mil(text.height / 10),
            rotation=text.rotation % 360,
        ))

    model = None
    if footprint.model is not None:
        ref = footprint.model
        model = AltiumModel(
            name=ref.filename,
            model_id=model_id(identity, ref.filename),
            rotation=ref.rotation,
            z=mil(ref.z_offset),
        )

    converted = AltiumFootprint(
        name=footprint.name,
        description=footprint.description,
        pads=tuple(pads),
        tracks=tuple(tracks),
        arcs=tuple(arcs),
        texts=tuple(texts),
        model=model,
    )
    return converted, warnings
