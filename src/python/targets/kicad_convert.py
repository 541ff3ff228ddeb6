"""Maps canonical components to kiutils symbol and footprint objects.

Symbols are drawn in millimetres with Y pointing up, so the source Y axis is
flipped. Footprints keep the source Y sense. Fresh kiutils objects are built
on every call.
"""

import math
from typing import Optional

from kiutils.footprint import Attributes, DrillDefinition, Model
from kiutils.footprint import Footprint as KiFootprint
from kiutils.footprint import Pad as KiPad
from kiutils.items.common import Coordinate, Effects, Fill, Font, Position, Property, Stroke
from kiutils.items.fpitems import FpArc, FpCircle, FpLine, FpText
from kiutils.items.syitems import SyArc, SyCircle, SyPolyLine, SyRect, SyText
from kiutils.symbol import Symbol as KiSymbol
from kiutils.symbol import SymbolPin

from config import ConverterConfig
from models import Footprint, PadLayer, PadShape, PinElectrical, PinOrientation, Symbol
from normalizer import (
    MM_PER_MIL, Millimeter, footprint_placement, mm_from_grid, quantize_mm,
    sanitize_name, symbol_placement,
)
from primitive_classifier import (
    lookup, resolve_or_fallback, resolve_pad_layer, resolve_pad_shape,
    resolve_pin_electrical, resolve_pin_orientation,
)

KICAD_VERSION = "20211014"
GENERATOR = "lcscbridge"

PIN_TYPES = {
    PinElectrical.INPUT: "input",
    PinElectrical.IO: "bidirectional",
    PinElectrical.OUTPUT: "output",
    PinElectrical.OPEN_COLLECTOR: "open_collector",
    PinElectrical.PASSIVE: "passive",
    PinElectrical.HIZ: "tri_state",
    PinElectrical.OPEN_EMITTER: "open_emitter",
    PinElectrical.POWER: "power_in",
}

PIN_ANGLES = {
    PinOrientation.RIGHT: 0,
    PinOrientation.UP: 90,
    PinOrientation.LEFT: 180,
    PinOrientation.DOWN: 270,
}

SMD_PAD_LAYERS = {
    PadLayer.TOP: ["F.Cu", "F.Paste", "F.Mask"],
    PadLayer.BOTTOM: ["B.Cu", "B.Paste", "B.Mask"],
    PadLayer.MULTI_LAYER: ["*.Cu", "*.Paste", "*.Mask"],
}
THT_PAD_LAYERS = ["*.Cu", "*.Mask"]

# EasyEDA layer id -> KiCad layer for lines, arcs and text.
GRAPHIC_LAYERS = {
    "1": "F.Cu",
    "2": "B.Cu",
    "3": "F.SilkS",
    "4": "B.SilkS",
    "5": "F.Paste",
    "6": "B.Paste",
    "7": "F.Mask",
    "8": "B.Mask",
    "10": "Edge.Cuts",
    "11": "Edge.Cuts",
    "12": "Cmts.User",
    "13": "F.Fab",
    "14": "B.Fab",
    "15": "Dwgs.User",
    "99": "F.Fab",
    "100": "F.Fab",
    "101": "F.Fab",
}
DEFAULT_GRAPHIC_LAYER = "F.SilkS"

OCTAGON_CHAMFER_RATIO = 0.2929
ROUNDRECT_RATIO = 0.25
SYMBOL_LINE_WIDTH = 0.254
TEXT_SIZE = 1.27


def _effects(size: float = TEXT_SIZE, hide: bool = False) -> Effects:
    return Effects(font=Font(height=size, width=size), hide=hide)


def _property(key: str, value: str, prop_id: int, x: float = 0.0, y: float = 0.0,
              hide: bool = False) -> Property:
    return Property(key=key, value=value, id=prop_id,
                    position=Position(X=x, Y=y, angle=0), effects=_effects(hide=hide))


# ── Symbol ───────────────────────────────────────────────────────────────────

def convert_symbol(symbol: Symbol, config: ConverterConfig,
                   footprint_ref: Optional[str] = None,
                   identity: Optional[str] = None) -> tuple[KiSymbol, list[str]]:
    """Convert a canonical symbol. Returns the kiutils symbol and warnings."""
    warnings: list[str] = []
    placement = symbol_placement(symbol, config.anchor)
    unit = config.symbol_unit_mil

    def mm(value: float) -> Millimeter:
        return quantize_mm(mm_from_grid(value, unit))

    def point(x: float, y: float) -> tuple[Millimeter, Millimeter]:
        sx, sy = placement.shift(x, y)
        # + 0.0 turns -0.0 into 0.0
        return mm(sx), Millimeter(-mm(sy) + 0.0)

    def on_circle(cx: float, cy: float, r: float, degrees: float) -> Position:
        theta = math.radians(degrees)
        x, y = point(cx + r * math.cos(theta), cy + r * math.sin(theta))
        return Position(X=x, Y=y)

    graphics = []
    extents = []
    for rect in symbol.rectangles:
        x1, y1 = point(rect.x, rect.y)
        x2, y2 = point(rect.x + rect.width, rect.y + rect.height)
        extents += [(x1, y1), (x2, y2)]
        graphics.append(SyRect(
            start=Position(X=x1, Y=y1), end=Position(X=x2, Y=y2),
            stroke=Stroke(width=SYMBOL_LINE_WIDTH),
            fill=Fill(type="background" if rect.filled else "none"),
        ))
    for ln in symbol.lines:
        x1, y1 = point(ln.x1, ln.y1)
        x2, y2 = point(ln.x2, ln.y2)
        extents += [(x1, y1), (x2, y2)]
        graphics.append(SyPolyLine(
            points=[Position(X=x1, Y=y1), Position(X=x2, Y=y2)],
            stroke=Stroke(width=SYMBOL_LINE_WIDTH), fill=Fill(type="none"),
        ))
    for circle in symbol.circles:
        cx, cy = point(circle.cx, circle.cy)
        radius = mm(circle.radius)
        extents += [(cx, cy + radius), (cx, cy - radius)]
        graphics.append(SyCircle(
            center=Position(X=cx, Y=cy), radius=radius,
            stroke=Stroke(width=SYMBOL_LINE_WIDTH),
            fill=Fill(type="background" if circle.filled else "none"),
        ))
    for arc in symbol.arcs:
        sweep = (arc.end_angle - arc.start_angle) % 360
        if sweep == 0:
            cx, cy = point(arc.cx, arc.cy)
            radius = mm(arc.radius)
            extents += [(cx, cy + radius), (cx, cy - radius)]
            graphics.append(SyCircle(center=Position(X=cx, Y=cy), radius=radius,
                                     stroke=Stroke(width=SYMBOL_LINE_WIDTH),
                                     fill=Fill(type="none")))
            continue
        # Points are computed in source space, then flipped with everything else.
        start, mid, end = (on_circle(arc.cx, arc.cy, arc.radius, arc.start_angle + sweep * f)
                           for f in (0, 0.5, 1))
        extents += [(p.X, p.Y) for p in (start, mid, end)]
        graphics.append(SyArc(
            start=start, mid=mid, end=end,
            stroke=Stroke(width=SYMBOL_LINE_WIDTH), fill=Fill(type="none"),
        ))
    for text in symbol.texts:
        x, y = point(text.x, text.y)
        graphics.append(SyText(
            text=text.text, position=Position(X=x, Y=y, angle=text.rotation % 360),
            effects=_effects(),
        ))

    pins = []
    for pin in symbol.pins:
        x, y = point(pin.x, pin.y)
        extents.append((x, y))
        if pin.length is None:
            length = quantize_mm(config.default_pin_length_mil * MM_PER_MIL)
        else:
            length = mm(pin.length)
        electrical = resolve_or_fallback(resolve_pin_electrical, pin.electrical, warnings=warnings)
        orientation = resolve_or_fallback(resolve_pin_orientation, pin.rotation, warnings=warnings)
        pins.append(SymbolPin(
            electricalType=PIN_TYPES[electrical],
            graphicalStyle="line",
            position=Position(X=x, Y=y, angle=PIN_ANGLES[orientation]),
            length=length,
            name=pin.name or "~",
            number=pin.designator,
            nameEffects=_effects(),
            numberEffects=_effects(),
        ))

    if not symbol.rectangles and config.add_default_body:
        pad = quantize_mm(config.default_body_padding_mil * MM_PER_MIL)
        if pins:
            xs = [p.position.X for p in pins]
            ys = [p.position.Y for p in pins]
            x1, y1, x2, y2 = min(xs) - pad, max(ys) + pad, max(xs) + pad, min(ys) - pad
        else:
            x1, y1, x2, y2 = -2.54, 5.08, 2.54, -5.08
        extents += [(x1, y1), (x2, y2)]
        graphics.append(SyRect(
            start=Position(X=x1, Y=y1), end=Position(X=x2, Y=y2),
            stroke=Stroke(width=SYMBOL_LINE_WIDTH), fill=Fill(type="background"),
        ))

    top = max((p[1] for p in extents), default=0.0)
    bottom = min((p[1] for p in extents), default=0.0)
    properties = [
        _property("Reference", symbol.prefix, 0, y=top + TEXT_SIZE),
        _property("Value", symbol.name, 1, y=bottom - TEXT_SIZE),
        _property("Footprint", footprint_ref or "", 2, hide=True),
        _property("Datasheet", "", 3, hide=True),
        _property("ki_description", symbol.description, 4, hide=True),
    ]
    if identity:
        properties.append(_property("LCSC", identity, 5, hide=True))

    name = sanitize_name(symbol.name)
    converted = KiSymbol(
        entryName=name,
        inBom=True,
        onBoard=True,
        properties=properties,
        units=[
            KiSymbol(entryName=name, unitId=0, styleId=1, graphicItems=graphics),
            KiSymbol(entryName=name, unitId=1, styleId=1, pins=pins),
        ],
    )
    return converted, warnings


# ── Footprint ────────────────────────────────────────────────────────────────

def _pad_shape(shape: PadShape, width: float, height: float) -> dict:
    if shape is PadShape.RECTANGLE:
        return {"shape": "rect"}
    if shape is PadShape.ROUND_RECT:
        return {"shape": "roundrect", "roundrectRatio": ROUNDRECT_RATIO}
    if shape is PadShape.OCTAGONAL:
        return {
            "shape": "roundrect",
            "roundrectRatio": 0,
            "chamferRatio": OCTAGON_CHAMFER_RATIO,
            "chamfer": ["top_left", "top_right", "bottom_left", "bottom_right"],
        }
    return {"shape": "circle" if width == height else "oval"}


def _arc_point(cx: float, cy: float, r: float, degrees: float) -> Position:
    theta = math.radians(degrees)
    return Position(X=quantize_mm(cx + r * math.cos(theta)),
                    Y=quantize_mm(cy + r * math.sin(theta)))


def convert_footprint(footprint: Footprint, identity: str, config: ConverterConfig,
                      entry_name: Optional[str] = None) -> tuple[KiFootprint, list[str]]:
    """Convert a canonical footprint. Returns the kiutils footprint and warnings.

    ``entry_name`` overrides the footprint name, which must match the file name.
    """
    warnings: list[str] = []
    placement = footprint_placement(footprint, config.anchor)
    unit = config.footprint_unit_mm

    def mm(value: float) -> Millimeter:
        return quantize_mm(value * unit)

    def point(x: float, y: float) -> tuple[Millimeter, Millimeter]:
        sx, sy = placement.shift(x, y)
        return mm(sx), mm(sy)

    def graphic_layer(tag: Optional[str]) -> str:
        if tag is None:
            return DEFAULT_GRAPHIC_LAYER
        return resolve_or_fallback(lookup, GRAPHIC_LAYERS, tag, "graphic layer",
                                   DEFAULT_GRAPHIC_LAYER, warnings=warnings)

    pads = []
    through_hole = False
    for pad in footprint.pads:
        x, y = point(pad.x, pad.y)
        width, height = mm(pad.width), mm(pad.height)
        shape = resolve_or_fallback(resolve_pad_shape, pad.shape, warnings=warnings)
        layer = resolve_or_fallback(resolve_pad_layer, pad.layer, pad.hole_diameter,
                                    warnings=warnings)
        kwargs = _pad_shape(shape, width, height)
        if pad.hole_diameter > 0:
            through_hole = True
            pad_type = "thru_hole" if pad.plated else "np_thru_hole"
            kwargs["drill"] = DrillDefinition(diameter=mm(pad.hole_diameter))
            layers = list(THT_PAD_LAYERS)
        else:
            pad_type = "smd"
            layers = list(SMD_PAD_LAYERS[layer])
        pads.append(KiPad(
            number=pad.name,
            type=pad_type,
            position=Position(X=x, Y=y, angle=pad.rotation % 360 or None),
            size=Position(X=width, Y=height),
            layers=layers,
            **kwargs,
        ))

    top = min((p.position.Y for p in pads), default=0.0)
    bottom = max((p.position.Y for p in pads), default=0.0)
    graphics = [
        FpText(type="reference", text="REF**", layer="F.SilkS",
               position=Position(X=0, Y=quantize_mm(top - 2)), effects=_effects(1.0)),
        FpText(type="value", text=entry_name or footprint.name, layer="F.Fab",
               position=Position(X=0, Y=quantize_mm(bottom + 2)), effects=_effects(1.0)),
    ]
    for ln in footprint.lines:
        x1, y1 = point(ln.x1, ln.y1)
        x2, y2 = point(ln.x2, ln.y2)
        graphics.append(FpLine(start=Position(X=x1, Y=y1), end=Position(X=x2, Y=y2),
                               layer=graphic_layer(ln.layer), width=mm(ln.width)))
    for arc in footprint.arcs:
        cx, cy = point(arc.cx, arc.cy)
        radius = mm(arc.radius)
        layer = graphic_layer(arc.layer)
        sweep = (arc.end_angle - arc.start_angle) % 360
        if sweep == 0:
            graphics.append(FpCircle(center=Position(X=cx, Y=cy),
                                     end=Position(X=quantize_mm(cx + radius), Y=cy),
                                     layer=layer, width=mm(arc.width)))
            continue
        graphics.append(FpArc(
            start=_arc_point(cx, cy, radius, arc.start_angle),
            mid=_arc_point(cx, cy, radius, arc.start_angle + sweep / 2),
            end=_arc_point(cx, cy, radius, arc.start_angle + sweep),
            layer=layer,
            width=mm(arc.width),
        ))
    for text in footprint.texts:
        x, y = point(text.x, text.y)
        graphics.append(FpText(type="user", text=text.text, layer=graphic_layer(text.layer),
                               position=Position(X=x, Y=y, angle=text.rotation % 360 or None),
                               effects=_effects(mm(text.height))))

    models = []
    if footprint.model is not None:
        ref = footprint.model
        models.append(Model(
            path=f"${{{config.model_path_var}}}/{ref.filename}",
            pos=Coordinate(X=0, Y=0, Z=mm(ref.z_offset)),
            scale=Coordinate(X=1, Y=1, Z=1),
            rotate=Coordinate(X=ref.rotation[0], Y=ref.rotation[1], Z=ref.rotation[2]),
        ))

    converted = KiFootprint(
        entryName=entry_name or footprint.name,
        version=KICAD_VERSION,
        generator=GENERATOR,
        layer="F.Cu",
        description=footprint.description,
        tags=identity,
        attributes=Attributes(type="through_hole" if through_hole else "smd"),
        graphicItems=graphics,
        pads=pads,
        models=models,
    )
    return converted, warnings
