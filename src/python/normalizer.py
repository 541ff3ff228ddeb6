"""Converts canonical source coordinates into target units.

Handles:
- Schematic grid units -> mil (1 mil resolution)
- Footprint millimetres -> mil (0.01 mil resolution, round half to even)
- Millimetre values for the KiCad target (1 nm resolution)
- Re-anchoring every primitive on a single origin
- File-safe component names
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Iterable, NewType, Optional

from config import Anchor
from errors import UnitConversionError
from models import Footprint, Symbol

Mil = NewType("Mil", float)
Millimeter = NewType("Millimeter", float)

MIL_PER_MM = 39.3701
MM_PER_MIL = 0.0254
MIL_PER_GRID_UNIT = 100.0

SCHEMATIC_RESOLUTION = Decimal("1")
PCB_RESOLUTION = Decimal("0.01")
KICAD_RESOLUTION = Decimal("0.000001")

# Altium stores coordinates as int32 in 1/10000 mil.
MAX_MIL = 214748.3647
MAX_MM = MAX_MIL * MM_PER_MIL

# Characters not allowed in file/symbol names
_SANITIZE_RE = re.compile(r'[/\\:*?"<>|]')


def sanitize_name(name: str) -> str:
    """Replace filesystem-unsafe characters with underscores."""
    return _SANITIZE_RE.sub('_', name.strip())


def _checked(value: float, limit: float, unit: str) -> float:
    if not math.isfinite(value):
        raise UnitConversionError(f"Non-finite coordinate {value!r}")
    if abs(value) > limit:
        raise UnitConversionError(
            f"Coordinate {value} {unit} exceeds the representable range of ±{limit} {unit}"
        )
    return value


def _round_half_even(value: float, step: Decimal) -> float:
    # repr() keeps the shortest decimal form, so ties are judged on the
    # value as written rather than on its binary approximation.
    return float(Decimal(repr(value)).quantize(step, rounding=ROUND_HALF_EVEN))


def mil_from_mm(value: float) -> Mil:
    """Millimetres to mil, unrounded."""
    if not math.isfinite(value):
        raise UnitConversionError(f"Non-finite coordinate {value!r}")
    return Mil(value * MIL_PER_MM)


def mm_from_mil(value: float) -> Millimeter:
    """Mil to millimetres, unrounded. Inverse of mil_from_mm."""
    if not math.isfinite(value):
        raise UnitConversionError(f"Non-finite coordinate {value!r}")
    return Millimeter(value / MIL_PER_MM)


def mil_from_grid(value: float, unit_mil: float = MIL_PER_GRID_UNIT) -> Mil:
    """Schematic grid units to mil, unrounded."""
    if not math.isfinite(value):
        raise UnitConversionError(f"Non-finite coordinate {value!r}")
    return Mil(value * unit_mil)


def mm_from_grid(value: float, unit_mil: float = MIL_PER_GRID_UNIT) -> Millimeter:
    """Schematic grid units to millimetres, for targets that draw symbols in mm."""
    return Millimeter(mil_from_grid(value, unit_mil) * MM_PER_MIL)


def quantize_mil(value: float, step: Decimal = PCB_RESOLUTION) -> Mil:
    """Round a mil value to the target resolution and check its range."""
    _checked(value, MAX_MIL, "mil")
    return Mil(_round_half_even(value, step))


def schematic_mil(value: float) -> int:
    """Round a schematic mil value to Altium's whole-mil grid."""
    return int(quantize_mil(value, SCHEMATIC_RESOLUTION))


def quantize_mm(value: float) -> Millimeter:
    """Round a millimetre value to KiCad's 1 nm resolution and check its range."""
    _checked(value, MAX_MM, "mm")
    return Millimeter(_round_half_even(value, KICAD_RESOLUTION))


def bounding_box(points: Iterable[tuple[float, float]]
                 ) -> Optional[tuple[float, float, float, float]]:
    """Return (min_x, min_y, max_x, max_y) of the points, or None if empty."""
    points = list(points)
    if not points:
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def symbol_points(symbol: Symbol) -> list[tuple[float, float]]:
    """Every point that defines the extent of a symbol."""
    points = [(p.x, p.y) for p in symbol.pins]
    for r in symbol.rectangles:
        points += [(r.x, r.y), (r.x + r.width, r.y + r.height)]
    for ln in symbol.lines:
        points += [(ln.x1, ln.y1), (ln.x2, ln.y2)]
    for shape in symbol.circles + symbol.arcs:
        points += [(shape.cx - shape.radius, shape.cy - shape.radius),
                   (shape.cx + shape.radius, shape.cy + shape.radius)]
    points += [(t.x, t.y) for t in symbol.texts]
    return points


def footprint_points(footprint: Footprint) -> list[tuple[float, float]]:
    """Every point that defines the extent of a footprint."""
    points = []
    for pad in footprint.pads:
        hw, hh = pad.width / 2, pad.height / 2
        points += [(pad.x - hw, pad.y - hh), (pad.x + hw, pad.y + hh)]
    for ln in footprint.lines:
        points += [(ln.x1, ln.y1), (ln.x2, ln.y2)]
    for arc in footprint.arcs:
        points += [(arc.cx - arc.radius, arc.cy - arc.radius),
                   (arc.cx + arc.radius, arc.cy + arc.radius)]
    points += [(t.x, t.y) for t in footprint.texts]
    return points


@dataclass(frozen=True)
class Placement:
    """Translation applied to every primitive of one symbol or footprint."""
    dx: float = 0.0
    dy: float = 0.0

    def shift(self, x: float, y: float) -> tuple[float, float]:
        return x - self.dx, y - self.dy


def _placement(origin: tuple[float, float], points: list[tuple[float, float]],
               anchor: Anchor) -> Placement:
    if anchor is Anchor.CENTER:
        box = bounding_box(points)
        if box is not None:
            return Placement((box[0] + box[2]) / 2, (box[1] + box[3]) / 2)
    return Placement(origin[0], origin[1])


def symbol_placement(symbol: Symbol, anchor: Anchor = Anchor.SOURCE_ORIGIN) -> Placement:
    """Compute the translation for a symbol once, for the chosen anchor."""
    return _placement(symbol.origin, symbol_points(symbol), anchor)


def footprint_placement(footprint: Footprint,
                        anchor: Anchor = Anchor.SOURCE_ORIGIN) -> Placement:
    """Compute the translation for a footprint once, for the chosen anchor."""
    return _placement(footprint.origin, footprint_points(footprint), anchor)
