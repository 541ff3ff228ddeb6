"""Minimal SVG path support for EasyEDA shapes.

EasyEDA stores symbol paths (``PT``, ``PATH``), symbol arcs (``A``) and
footprint arcs (``ARC``) as SVG path data. Only the commands the editor emits
are understood: M, L, H, V, A and Z, in absolute and relative form.
"""

import math
import re
from typing import NamedTuple

_COMMANDS = re.compile(r"([MmLlHhVvCcSsQqTtAaZz])([^MmLlHhVvCcSsQqTtAaZz]*)")
_FLOATS = re.compile(r"[-+]?(?:[0-9]*\.[0-9]+|[0-9]+\.?)(?:[eE][-+]?[0-9]+)?")

# Number of parameters consumed by one repetition of each command.
_ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "A": 7, "Z": 0}


class PathCommand(NamedTuple):
    command: str
    params: list[float]


class CenterArc(NamedTuple):
    cx: float
    cy: float
    radius: float
    start_angle: float  # degrees, arc sweeps toward increasing angle
    end_angle: float


def parse_path(path: str) -> list[PathCommand]:
    """Split SVG path data into commands, expanding implicit repetitions."""
    commands = []
    for letter, params_str in _COMMANDS.findall(path):
        params = [float(p) for p in _FLOATS.findall(params_str)]
        upper = letter.upper()
        if upper not in _ARITY:
            raise ValueError(f"unsupported path command {letter!r}")
        arity = _ARITY[upper]
        if arity == 0:
            commands.append(PathCommand(letter, []))
            continue
        if not params or len(params) % arity:
            raise ValueError(f"path command {letter!r} has {len(params)} parameters")
        # Repeated moveto pairs are implicit linetos.
        repeat = ("L" if letter == "M" else "l") if upper == "M" else letter
        for i in range(0, len(params), arity):
            commands.append(PathCommand(repeat if i else letter, params[i:i + arity]))
    if not commands:
        raise ValueError("empty path")
    return commands


def path_vertices(path: str) -> tuple[list[tuple[float, float]], bool]:
    """Flatten a path into its vertices; arcs contribute their end point.

    Returns the vertex list and whether the path was closed with Z.
    """
    points = []
    closed = False
    x = y = 0.0
    for letter, params in parse_path(path):
        relative = letter.islower()
        upper = letter.upper()
        if upper in ("M", "L"):
            x, y = (x + params[0], y + params[1]) if relative else (params[0], params[1])
        elif upper == "H":
            x = x + params[0] if relative else params[0]
        elif upper == "V":
            y = y + params[0] if relative else params[0]
        elif upper == "A":
            x, y = (x + params[5], y + params[6]) if relative else (params[5], params[6])
        elif upper == "Z":
            closed = True
            continue
        points.append((x, y))
    return points, closed


def path_outline(path: str) -> tuple[list[tuple[float, float, float, float]], list[CenterArc]]:
    """Split a path into straight segments ``(x1, y1, x2, y2)`` and centre-form arcs."""
    segments = []
    arcs = []
    x = y = 0.0
    start = (0.0, 0.0)
    for letter, params in parse_path(path):
        relative = letter.islower()
        upper = letter.upper()
        if upper == "M":
            x, y = (x + params[0], y + params[1]) if relative else (params[0], params[1])
            start = (x, y)
            continue
        if upper == "Z":
            nx, ny = start
        elif upper == "L":
            nx, ny = (x + params[0], y + params[1]) if relative else (params[0], params[1])
        elif upper == "H":
            nx, ny = (x + params[0] if relative else params[0]), y
        elif upper == "V":
            nx, ny = x, (y + params[0] if relative else params[0])
        else:
            nx, ny = (x + params[5], y + params[6]) if relative else (params[5], params[6])
            arcs.append(endpoint_to_center(x, y, params[0], params[1], params[2],
                                           bool(params[3]), bool(params[4]), nx, ny))
            x, y = nx, ny
            continue
        if (nx, ny) != (x, y):
            segments.append((x, y, nx, ny))
        x, y = nx, ny
    return segments, arcs


def endpoint_to_center(x1: float, y1: float, rx: float, ry: float, rotation: float,
                       large_arc: bool, sweep: bool, x2: float, y2: float) -> CenterArc:
    """Convert an SVG endpoint-parameterized arc to centre form.

    Follows the SVG implementation notes (F.6.5), including radius
    correction when the radii are too small to span the chord. Elliptical
    arcs are reduced to a circle of radius ``rx``.
    """
    if x1 == x2 and y1 == y2:
        raise ValueError("arc start and end points coincide")
    rx, ry = abs(rx), abs(ry)
    if rx == 0 or ry == 0:
        raise ValueError("arc has a zero radius")

    phi = math.radians(rotation)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    dx, dy = (x1 - x2) / 2, (y1 - y2) / 2
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    scale = (x1p ** 2) / (rx ** 2) + (y1p ** 2) / (ry ** 2)
    if scale > 1:
        rx *= math.sqrt(scale)
        ry *= math.sqrt(scale)

    numerator = rx ** 2 * ry ** 2 - rx ** 2 * y1p ** 2 - ry ** 2 * x1p ** 2
    denominator = rx ** 2 * y1p ** 2 + ry ** 2 * x1p ** 2
    coef = math.sqrt(max(0.0, numerator / denominator))
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    start = math.degrees(math.atan2(y1 - cy, x1 - cx)) % 360
    end = math.degrees(math.atan2(y2 - cy, x2 - cx)) % 360
    # SVG sweep=1 runs toward increasing angle; otherwise swap the ends.
    if not sweep:
        start, end = end, start
    return CenterArc(cx, cy, rx, start, end)


def arc_from_path(path: str) -> CenterArc:
    """Read a single ``M x y A ...`` arc from path data."""
    commands = parse_path(path)
    if len(commands) < 2 or commands[0].command != "M" or commands[1].command.upper() != "A":
        raise ValueError(f"expected 'M ... A ...' arc path, got {path!r}")
    x1, y1 = commands[0].params
    rx, ry, rotation, large_arc, sweep, x2, y2 = commands[1].params
    if commands[1].command == "a":
        x2, y2 = x1 + x2, y1 + y2
    return endpoint_to_center(x1, y1, rx, ry, rotation, bool(large_arc), bool(sweep), x2, y2)
