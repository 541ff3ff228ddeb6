"""Turns EasyEDA catalog component JSON into the canonical model.

Shapes are ``~``-separated strings; a pin additionally splits into ``^^``
segments (pin, dot, path, name, number, ...). A shape that is malformed or
of an unsupported kind is skipped with a warning. Only a payload without the
fields that identify the component is rejected as a whole.
"""

import json
import logging
import math
import re
from dataclasses import replace
from typing import Callable, Optional

from errors import ParseError
from models import (
    Arc, Circle, Component, Footprint, Line, Model3DRef, Pad, Pin, Rectangle, Symbol,
    Text,
)
from normalizer import sanitize_name
from easyeda.svg_path import arc_from_path, path_outline, path_vertices

logger = logging.getLogger(__name__)

_PIN_LENGTH_RE = re.compile(r"[hHvV]\s*([-+]?[0-9]*\.?[0-9]+)")
_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{6})$")
_FONT_SIZE_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)")

DESCRIPTION_SUFFIX = "Converted from EasyEDA"

# Straight segments used to draw a non-circular ellipse.
ELLIPSE_SEGMENTS = 32


# ── Field helpers ────────────────────────────────────────────────────────────

def _float(value: str) -> float:
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"non-finite number {value!r}")
    return result


def _optional_float(fields: list[str], index: int) -> Optional[float]:
    if len(fields) <= index or not fields[index].strip():
        return None
    return _float(fields[index])


def _field(fields: list[str], index: int) -> str:
    return fields[index].strip() if len(fields) > index else ""


def _color(value: str) -> Optional[int]:
    """Parse ``#RRGGBB`` into an RGB integer; anything else is no colour."""
    m = _COLOR_RE.match(value.strip())
    return int(m.group(1), 16) if m else None


def _filled(value: str) -> bool:
    return bool(value) and value.lower() != "none"


def _points(text: str) -> list[tuple[float, float]]:
    values = [_float(v) for v in text.replace(",", " ").split()]
    if len(values) < 4 or len(values) % 2:
        raise ValueError(f"expected at least two points, got {text!r}")
    return list(zip(values[0::2], values[1::2]))


def _segments(points: list[tuple[float, float]], closed: bool, width: float,
              color: Optional[int] = None, layer: Optional[str] = None) -> list[Line]:
    if closed and points[0] != points[-1]:
        points = points + [points[0]]
    return [Line(x1, y1, x2, y2, width=width, color=color, layer=layer)
            for (x1, y1), (x2, y2) in zip(points, points[1:])]


# ── Symbol shapes ────────────────────────────────────────────────────────────

def _parse_pin(shape: str) -> list:
    # P~show~electric~number~x~y~rotation~id~locked ^^ dot ^^ path ^^ name ^^ number ...
    segments = shape.split("^^")
    fields = segments[0].split("~")
    designator = _field(fields, 3)
    if not designator and len(segments) > 4:
        designator = _field(segments[4].split("~"), 4)
    if not designator:
        raise ValueError("pin has no number")

    length = None
    if len(segments) > 2:
        lengths = _PIN_LENGTH_RE.findall(segments[2])
        if lengths:
            length = abs(_float(lengths[-1]))

    name = ""
    if len(segments) > 3:
        name = _field(segments[3].split("~"), 4)

    return [Pin(
        x=_float(fields[4]),
        y=_float(fields[5]),
        name=name,
        designator=designator,
        length=length,
        electrical=_field(fields, 2) or None,
        rotation=_optional_float(fields, 6),
    )]


def _parse_rectangle(shape: str) -> list:
    # R~x~y~rx~ry~width~height~stroke_color~stroke_width~stroke_style~fill_color~id
    fields = shape.split("~")
    return [Rectangle(
        x=_float(fields[1]),
        y=_float(fields[2]),
        width=_float(fields[5]),
        height=_float(fields[6]),
        color=_color(_field(fields, 7)),
        filled=_filled(_field(fields, 10)),
        stroke_width=_optional_float(fields, 8) or 1.0,
    )]


def _parse_polyline(shape: str, closed: bool = False) -> list:
    # PL~points~stroke_color~stroke_width~stroke_style~fill_color~id~locked
    fields = shape.split("~")
    return _segments(_points(fields[1]), closed,
                     width=_optional_float(fields, 3) or 1.0,
                     color=_color(_field(fields, 2)))


def _parse_polygon(shape: str) -> list:
    return _parse_polyline(shape, closed=True)


def _parse_path(shape: str) -> list:
    # PT~path~stroke_color~stroke_width~stroke_style~fill_color~id~locked
    fields = shape.split("~")
    points, closed = path_vertices(fields[1])
    if len(points) < 2:
        raise ValueError("path has fewer than two vertices")
    return _segments(points, closed,
                     width=_optional_float(fields, 3) or 1.0,
                     color=_color(_field(fields, 2)))


def _path_shapes(path: str, width: float, color: Optional[int] = None) -> list:
    segments, arcs = path_outline(path)
    if not segments and not arcs:
        raise ValueError("path draws nothing")
    shapes = [Line(x1, y1, x2, y2, width=width, color=color) for x1, y1, x2, y2 in segments]
    shapes += [Arc(cx=a.cx, cy=a.cy, radius=a.radius, start_angle=a.start_angle,
                   end_angle=a.end_angle, width=width, color=color) for a in arcs]
    return shapes


def _parse_symbol_circle(shape: str) -> list:
    # C~cx~cy~r~stroke_color~stroke_width~stroke_style~fill_color~id~locked
    fields = shape.split("~")
    return [Circle(
        cx=_float(fields[1]),
        cy=_float(fields[2]),
        radius=_float(fields[3]),
        width=_optional_float(fields, 5) or 1.0,
        color=_color(_field(fields, 4)),
        filled=_filled(_field(fields, 7)),
    )]


def _parse_ellipse(shape: str) -> list:
    # E~cx~cy~rx~ry~stroke_color~stroke_width~stroke_style~fill_color~id~locked
    fields = shape.split("~")
    cx, cy = _float(fields[1]), _float(fields[2])
    rx, ry = _float(fields[3]), _float(fields[4])
    width = _optional_float(fields, 6) or 1.0
    color = _color(_field(fields, 5))
    if rx == ry:
        return [Circle(cx=cx, cy=cy, radius=rx, width=width, color=color,
                       filled=_filled(_field(fields, 8)))]
    steps = [2 * math.pi * i / ELLIPSE_SEGMENTS for i in range(ELLIPSE_SEGMENTS)]
    points = [(cx + rx * math.cos(t), cy + ry * math.sin(t)) for t in steps]
    return _segments(points, True, width=width, color=color)


def _parse_symbol_arc(shape: str) -> list:
    fields = shape.split("~")
    if _field(fields, 1)[:1] in ("M", "m"):
        # A~path~helper_dots~stroke_color~stroke_width~stroke_style~fill_color~id~locked
        return _path_shapes(fields[1], width=_optional_float(fields, 4) or 1.0,
                            color=_color(_field(fields, 3)))
    # A~cx~cy~radius~start_angle~end_angle~id~locked
    return [Arc(
        cx=_float(fields[1]),
        cy=_float(fields[2]),
        radius=_float(fields[3]),
        start_angle=_float(fields[4]),
        end_angle=_float(fields[5]),
        width=1.0,
    )]


def _parse_symbol_path(shape: str) -> list:
    # PATH~stroke_width~layer~path~id~locked
    fields = shape.split("~")
    return _path_shapes(fields[3], width=_optional_float(fields, 1) or 1.0)


def _parse_symbol_text(shape: str) -> list:
    fields = shape.split("~")
    if len(_field(fields, 1)) == 1 and not _field(fields, 1).lstrip("-").isdigit():
        # T~mark~x~y~rotation~color~font~size~weight~style~baseline~type~text~visible
        size = _FONT_SIZE_RE.match(_field(fields, 7))
        return [Text(
            x=_float(fields[2]),
            y=_float(fields[3]),
            rotation=_optional_float(fields, 4) or 0.0,
            color=_color(_field(fields, 5)),
            height=float(size.group(1)) if size else 7.0,
            text=fields[12],
        )]
    # Short form: T~x~y~rotation~text~...~size
    size = _FONT_SIZE_RE.match(_field(fields, 8))
    return [Text(
        x=_float(fields[1]),
        y=_float(fields[2]),
        rotation=_optional_float(fields, 3) or 0.0,
        text=fields[4],
        height=float(size.group(1)) if size else 12.0,
    )]


def _metadata(shape: str) -> list:
    return []


_SYMBOL_PARSERS: dict[str, Callable[[str], list]] = {
    "P": _parse_pin,
    "R": _parse_rectangle,
    "PL": _parse_polyline,
    "PG": _parse_polygon,
    "PT": _parse_path,
    "PATH": _parse_symbol_path,
    "C": _parse_symbol_circle,
    "E": _parse_ellipse,
    "A": _parse_symbol_arc,
    "T": _parse_symbol_text,
    "LIB": _metadata,
}


# ── Footprint shapes ─────────────────────────────────────────────────────────

def _parse_pad(shape: str) -> list:
    # PAD~shape~x~y~w~h~layer~net~number~hole_radius~points~rotation~id~hole_length~hole_points~plated
    fields = shape.split("~")
    hole_radius = _optional_float(fields, 9) or 0.0
    return [Pad(
        x=_float(fields[2]),
        y=_float(fields[3]),
        width=_float(fields[4]),
        height=_float(fields[5]),
        layer=_field(fields, 6) or None,
        name=_field(fields, 8),
        hole_diameter=hole_radius * 2,
        shape=_field(fields, 1),
        rotation=_optional_float(fields, 11) or 0.0,
        plated=_field(fields, 15).upper() != "N",
    )]


def _parse_track(shape: str) -> list:
    # TRACK~width~layer~net~points~id~locked
    fields = shape.split("~")
    return _segments(_points(fields[4]), False,
                     width=_float(fields[1]), layer=_field(fields, 2) or None)


def _parse_circle(shape: str) -> list:
    # CIRCLE~cx~cy~r~width~layer~id~locked
    fields = shape.split("~")
    return [Arc(
        cx=_float(fields[1]),
        cy=_float(fields[2]),
        radius=_float(fields[3]),
        start_angle=0.0,
        end_angle=360.0,
        width=_optional_float(fields, 4) or 0.0,
        layer=_field(fields, 5) or None,
    )]


def _parse_arc(shape: str) -> list:
    # ARC~width~layer~net~path~helper_dots~id~locked
    fields = shape.split("~")
    arc = arc_from_path(fields[4])
    return [Arc(
        cx=arc.cx,
        cy=arc.cy,
        radius=arc.radius,
        start_angle=arc.start_angle,
        end_angle=arc.end_angle,
        width=_float(fields[1]),
        layer=_field(fields, 2) or None,
    )]


def _parse_rect(shape: str) -> list:
    # RECT~x~y~width~height~stroke_width~id~layer~locked
    fields = shape.split("~")
    x, y = _float(fields[1]), _float(fields[2])
    w, h = _float(fields[3]), _float(fields[4])
    corners = [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
    return _segments(corners, True,
                     width=_optional_float(fields, 5) or 0.0,
                     layer=_field(fields, 7) or None)


def _parse_footprint_text(shape: str) -> list:
    # TEXT~type~x~y~stroke_width~rotation~mirror~layer~net~font_size~text~path~visible
    fields = shape.split("~")
    return [Text(
        x=_float(fields[2]),
        y=_float(fields[3]),
        rotation=_optional_float(fields, 5) or 0.0,
        layer=_field(fields, 7) or None,
        height=_float(fields[9]),
        text=fields[10],
    )]


def _parse_hole(shape: str) -> list:
    # HOLE~x~y~radius~id~locked
    fields = shape.split("~")
    diameter = _float(fields[3]) * 2
    return [Pad(
        x=_float(fields[1]),
        y=_float(fields[2]),
        width=diameter,
        height=diameter,
        hole_diameter=diameter,
        shape="ELLIPSE",
        name="",
        layer="11",
        plated=False,
    )]


def _parse_svgnode(shape: str) -> list:
    # SVGNODE~{"gId": ..., "attrs": {...}}
    node = json.loads(shape.split("~", 1)[1])
    attrs = node.get("attrs") or {}
    if attrs.get("c_etype") != "outline3D":
        raise ValueError(f"SVG node of type {attrs.get('c_etype')!r} is not a 3D outline")
    title = str(attrs.get("title") or "").strip()
    if not title:
        raise ValueError("3D outline has no title")
    rotation = tuple(_float(v) for v in str(attrs.get("c_rotation") or "0,0,0").split(","))
    if len(rotation) != 3:
        raise ValueError(f"expected three rotation angles, got {attrs.get('c_rotation')!r}")
    return [Model3DRef(
        filename=f"{sanitize_name(title)}.step",
        rotation=rotation,
        z_offset=_float(str(attrs.get("z") or 0)),
        uuid=attrs.get("uuid"),
        title=title,
    )]


_FOOTPRINT_PARSERS: dict[str, Callable[[str], list]] = {
    "PAD": _parse_pad,
    "TRACK": _parse_track,
    "CIRCLE": _parse_circle,
    "ARC": _parse_arc,
    "RECT": _parse_rect,
    "TEXT": _parse_footprint_text,
    "HOLE": _parse_hole,
    "SVGNODE": _parse_svgnode,
}


# ── Payload ──────────────────────────────────────────────────────────────────

def _warn(warnings: list[str], message: str) -> None:
    logger.warning("%s", message)
    warnings.append(message)


def _parse_shapes(shapes: list, parsers: dict, context: str, warnings: list[str]) -> list:
    """Run each shape through its parser, skipping the ones that fail."""
    primitives = []
    for index, shape in enumerate(shapes):
        if not isinstance(shape, str) or not shape.strip():
            _warn(warnings, f"Skipping {context} shape #{index}: not a shape string")
            continue
        tag = shape.split("~", 1)[0].strip()
        parser = parsers.get(tag)
        if parser is None:
            _warn(warnings, f"Skipping unsupported {context} primitive {tag!r}")
            continue
        try:
            primitives.extend(parser(shape))
        except (ValueError, IndexError, KeyError, TypeError, AttributeError) as e:
            _warn(warnings, f"Skipping malformed {context} {tag} #{index}: {e}")
    return primitives


def _data_str(container: dict, context: str) -> dict:
    data = container.get("dataStr")
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ParseError(f"{context}: dataStr is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"{context}: missing dataStr object")
    if not isinstance(data.get("shape"), list):
        raise ParseError(f"{context}: dataStr has no shape list")
    return data


def _origin(head: dict) -> tuple[float, float]:
    try:
        return _float(str(head.get("x", 0))), _float(str(head.get("y", 0)))
    except ValueError as e:
        raise ParseError(f"Invalid canvas origin: {e}") from e


def _head(data: dict) -> tuple[dict, dict]:
    head = data.get("head") if isinstance(data.get("head"), dict) else {}
    c_para = head.get("c_para") if isinstance(head.get("c_para"), dict) else {}
    return head, c_para


def _title(result: dict) -> str:
    title = result.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ParseError("Component payload has no title")
    return title.strip()


def load_payload(raw) -> dict:
    """Decode a catalog response, unwrapping the ``{"success", "result"}`` envelope."""
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON: {e}") from e
    else:
        data = raw
    if not isinstance(data, dict):
        raise ParseError("Component payload must be a JSON object")
    if "result" in data and "dataStr" not in data:
        if data.get("success") is False:
            raise ParseError(f"Catalog request failed: {data.get('message') or data.get('code')}")
        data = data["result"]
        if not isinstance(data, dict):
            raise ParseError("Catalog response has no result object")
    return data


def parse_symbol(result: dict) -> tuple[Symbol, list[str]]:
    """Build the canonical symbol from the ``dataStr`` payload."""
    name = _title(result)
    data = _data_str(result, "symbol")
    head, c_para = _head(data)
    warnings: list[str] = []

    pins, rectangles, lines, texts, circles, arcs = [], [], [], [], [], []
    designators = set()
    for item in _parse_shapes(data["shape"], _SYMBOL_PARSERS, "symbol", warnings):
        if isinstance(item, Pin):
            if item.designator in designators:
                _warn(warnings, f"Skipping pin with duplicate number {item.designator!r}")
                continue
            designators.add(item.designator)
            pins.append(item)
        elif isinstance(item, Rectangle):
            rectangles.append(item)
        elif isinstance(item, Line):
            lines.append(item)
        elif isinstance(item, Text):
            texts.append(item)
        elif isinstance(item, Circle):
            circles.append(item)
        elif isinstance(item, Arc):
            arcs.append(item)

    description = result.get("description")
    if not isinstance(description, str) or not description.strip():
        description = f"{name} - {DESCRIPTION_SUFFIX}"
    prefix = str(c_para.get("pre") or "U").replace("?", "").strip() or "U"

    symbol = Symbol(
        name=name,
        description=description.strip(),
        pins=tuple(pins),
        rectangles=tuple(rectangles),
        lines=tuple(lines),
        texts=tuple(texts),
        circles=tuple(circles),
        arcs=tuple(arcs),
        prefix=prefix,
        origin=_origin(head),
    )
    return symbol, warnings


def parse_footprint(result: dict) -> tuple[Optional[Footprint], list[str]]:
    """Build the canonical footprint from ``packageDetail``; None when absent."""
    package = result.get("packageDetail")
    if package is None:
        return None, []
    if not isinstance(package, dict):
        raise ParseError("packageDetail must be an object")
    data = _data_str(package, "footprint")
    head, c_para = _head(data)
    warnings: list[str] = []

    name = str(c_para.get("package") or package.get("title") or _title(result)).strip()
    pads, lines, arcs, texts = [], [], [], []
    model = None
    pad_names = set()
    for item in _parse_shapes(data["shape"], _FOOTPRINT_PARSERS, "footprint", warnings):
        if isinstance(item, Pad):
            # Unnamed pads are mechanical holes and may repeat.
            if item.name and item.name in pad_names:
                _warn(warnings, f"Skipping pad with duplicate name {item.name!r}")
                continue
            pad_names.add(item.name)
            pads.append(item)
        elif isinstance(item, Line):
            lines.append(item)
        elif isinstance(item, Arc):
            arcs.append(item)
        elif isinstance(item, Text):
            texts.append(item)
        elif isinstance(item, Model3DRef):
            if model is not None:
                _warn(warnings, f"Ignoring extra 3D model {item.title!r}")
                continue
            # One model file per component, named after it.
            model = replace(item, filename=f"{sanitize_name(_title(result))}.step")

    footprint = Footprint(
        name=name,
        description=f"{name} - {DESCRIPTION_SUFFIX}",
        pads=tuple(pads),
        lines=tuple(lines),
        arcs=tuple(arcs),
        texts=tuple(texts),
        model=model,
        origin=_origin(head),
    )
    return footprint, warnings


def _identity(result: dict, c_para: dict, lcsc_id: Optional[str]) -> str:
    if lcsc_id:
        return lcsc_id
    lcsc = result.get("lcsc")
    if isinstance(lcsc, dict) and lcsc.get("number"):
        return str(lcsc["number"])
    if c_para.get("Supplier Part"):
        return str(c_para["Supplier Part"])
    return _title(result)


def parse_component(payload, lcsc_id: Optional[str] = None) -> Component:
    """Parse a catalog payload (JSON text or decoded dict) into a Component.

    Raises ParseError when the payload cannot identify a component.
    """
    result = load_payload(payload)
    symbol, warnings = parse_symbol(result)
    footprint, footprint_warnings = parse_footprint(result)
    _, c_para = _head(_data_str(result, "symbol"))
    component = Component(
        identity=_identity(result, c_para, lcsc_id),
        name=symbol.name,
        symbol=symbol,
        footprint=footprint,
        warnings=tuple(warnings + footprint_warnings),
    )
    logger.info("Parsed %s: %d pins, %d pads", component.identity, len(symbol.pins),
                len(footprint.pads) if footprint else 0)
    return component
