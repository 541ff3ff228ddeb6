"""Data models for the LcscBridge conversion pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Target(Enum):
    ALTIUM = "altium"
    KICAD = "kicad"


class PinElectrical(Enum):
    INPUT = "input"
    IO = "io"
    OUTPUT = "output"
    OPEN_COLLECTOR = "open_collector"
    PASSIVE = "passive"
    HIZ = "hiz"
    OPEN_EMITTER = "open_emitter"
    POWER = "power"


class PinOrientation(Enum):
    RIGHT = "right"
    LEFT = "left"
    UP = "up"
    DOWN = "down"


class PadShape(Enum):
    ROUND = "round"
    RECTANGLE = "rectangle"
    OCTAGONAL = "octagonal"
    ROUND_RECT = "round_rect"


class PadLayer(Enum):
    TOP = "top"
    BOTTOM = "bottom"
    MULTI_LAYER = "multi_layer"


# Canonical primitives keep source units (symbol grid units, footprint mm)
# and raw source tags. Tags are resolved by primitive_classifier at
# conversion time.

@dataclass(frozen=True)
class Pin:
    x: float
    y: float
    name: str
    designator: str
    length: Optional[float] = None
    electrical: Optional[str] = None
    rotation: Optional[float] = None


@dataclass(frozen=True)
class Rectangle:
    x: float
    y: float
    width: float
    height: float
    color: Optional[int] = None
    filled: bool = False
    stroke_width: float = 1.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = 1.0
    color: Optional[int] = None
    layer: Optional[str] = None


@dataclass(frozen=True)
class Arc:
    """Arc swept from start_angle to end_angle in increasing-angle direction."""
    cx: float
    cy: float
    radius: float
    start_angle: float
    end_angle: float
    width: float
    layer: Optional[str] = None
    color: Optional[int] = None


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float
    width: float = 1.0
    color: Optional[int] = None
    filled: bool = False


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    height: float = 1.0
    rotation: float = 0.0
    color: Optional[int] = None
    layer: Optional[str] = None


@dataclass(frozen=True)
class Pad:
    x: float
    y: float
    width: float
    height: float
    hole_diameter: float
    shape: str
    name: str
    layer: Optional[str] = None
    rotation: float = 0.0
    plated: bool = True


@dataclass(frozen=True)
class Model3DRef:
    filename: str
    rotation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    z_offset: float = 0.0
    uuid: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class Symbol:
    name: str
    description: str
    pins: tuple[Pin, ...] = ()
    rectangles: tuple[Rectangle, ...] = ()
    lines: tuple[Line, ...] = ()
    texts: tuple[Text, ...] = ()
    circles: tuple[Circle, ...] = ()
    arcs: tuple[Arc, ...] = ()
    prefix: str = "U"
    origin: tuple[float, float] = (0.0, 0.0)


@dataclass(frozen=True)
class Footprint:
    name: str
    description: str
    pads: tuple[Pad, ...] = ()
    lines: tuple[Line, ...] = ()
    arcs: tuple[Arc, ...] = ()
    texts: tuple[Text, ...] = ()
    model: Optional[Model3DRef] = None
    origin: tuple[float, float] = (0.0, 0.0)


@dataclass(frozen=True)
class Component:
    """Canonical model of one catalog component."""
    identity: str
    name: str
    symbol: Symbol
    footprint: Optional[Footprint] = None
    warnings: tuple[str, ...] = ()


@dataclass
class ConversionResult:
    """Result of converting one component to the requested targets."""
    status: str  # "success", "error"
    name: Optional[str] = None
    identity: Optional[str] = None
    files: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None
