"""Serializes converted structures as ASCII SchLib/PcbLib.

Each record is an ordered sequence of ``(key, value)`` pairs, written as one
``|KEY=VALUE`` line per field and terminated by a blank line. Records are
built fresh for every export. A SchLib owner index is the owning record's
position counting the file header as 0; a PcbLib owner index counts from the
footprint record, which is 0.
"""

import logging
import math

from normalizer import Mil
from library import write_atomic
from targets.altium_convert import (
    AltiumFootprint, AltiumLabel, AltiumLine, AltiumPad, AltiumPin,
    AltiumRectangle, AltiumSymbol,
)

logger = logging.getLogger(__name__)

Record = tuple[tuple[str, str], ...]

SCHLIB_HEADER = "Protel for Windows - Schematic Library Editor Binary File Version 5.0"
PCBLIB_HEADER = "Protel for Windows - PCB Library Binary File Version 5.0"

# Every primitive belongs to the single component or footprint record.
OWNER_PART_ID = "-1"
AREA_COLOR_WHITE = "16777215"


# ── Value formatting ─────────────────────────────────────────────────────────

def escape_text(value: str) -> str:
    """Make a string safe for a single ``|KEY=VALUE`` field."""
    return value.replace('|', '\\|').replace('\n', ' ').replace('\r', '')


def format_mil(value: Mil) -> str:
    """Format a PCB mil value with its unit suffix: ``0MIL``, ``393.70MIL``."""
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite value {value!r}")
    if float(value).is_integer():
        return f"{int(value)}MIL"
    return f"{value:.2f}MIL"


def format_number(value: float) -> str:
    """Format an angle or other unitless number without trailing zeros."""
    rounded = round(value, 3)
    if float(rounded).is_integer():
        return str(int(rounded))
    return f"{rounded:.3f}".rstrip('0')


def _bool(value: bool) -> str:
    return "T" if value else "F"


def render_records(records: tuple[Record, ...]) -> str:
    """Render records to file text."""
    out = []
    for record in records:
        out.extend(f"|{key}={value}" for key, value in record)
        out.append("")
    return "\n".join(out) + "\n"


# ── SchLib ───────────────────────────────────────────────────────────────────

def _rectangle_record(rect: AltiumRectangle, owner: int) -> Record:
    return (
        ("RECORD", "2"),
        ("OWNERINDEX", str(owner)),
        ("OWNERPARTID", OWNER_PART_ID),
        ("LOCATION.X", str(rect.x1)),
        ("LOCATION.Y", str(rect.y1)),
        ("CORNER.X", str(rect.x2)),
        ("CORNER.Y", str(rect.y2)),
        ("XSIZE", str(abs(rect.x2 - rect.x1))),
        ("YSIZE", str(abs(rect.y2 - rect.y1))),
        ("COLOR", str(rect.color)),
        ("AREACOLOR", AREA_COLOR_WHITE),
        ("ISSOLID", _bool(rect.filled)),
        ("LINEWIDTH", str(rect.line_width)),
    )


def _line_record(line: AltiumLine, owner: int) -> Record:
    return (
        ("RECORD", "13"),
        ("OWNERINDEX", str(owner)),
        ("OWNERPARTID", OWNER_PART_ID),
        ("LINEWIDTH", str(line.line_width)),
        ("COLOR", str(line.color)),
        ("LOCATIONCOUNT", "2"),
        ("X1", str(line.x1)),
        ("Y1", str(line.y1)),
        ("X2", str(line.x2)),
        ("Y2", str(line.y2)),
    )


def _label_record(label: AltiumLabel, owner: int) -> Record:
    return (
        ("RECORD", "4"),
        ("OWNERINDEX", str(owner)),
        ("OWNERPARTID", OWNER_PART_ID),
        ("LOCATION.X", str(label.x)),
        ("LOCATION.Y", str(label.y)),
        ("TEXT", escape_text(label.text)),
        ("FONTID", "1"),
        ("COLOR", str(label.color)),
        ("ORIENTATION", str(label.orientation)),
    )


def _pin_record(pin: AltiumPin, owner: int) -> Record:
    return (
        ("RECORD", "41"),
        ("OWNERINDEX", str(owner)),
        ("OWNERPARTID", OWNER_PART_ID),
        ("LOCATION.X", str(pin.x)),
        ("LOCATION.Y", str(pin.y)),
        ("PINLENGTH", str(pin.length)),
        ("ELECTRICAL", str(pin.electrical)),
        ("PINCONGLOMERATE", str(pin.orientation)),
        ("NAME", escape_text(pin.name)),
        ("DESIGNATOR", escape_text(pin.designator)),
        ("SWAPIDPIN", ""),
        ("SWAPIDPART", ""),
        ("COLOR", "0"),
        ("PINNAME_POSITIONCONGLOMERATE", "11"),
    )


def build_schlib_records(symbol: AltiumSymbol) -> tuple[Record, ...]:
    """Build the full record sequence of a single-component SchLib."""
    body: list[Record] = []
    body.append((
        ("RECORD", "1"),
        ("LIBREF", escape_text(symbol.libref)),
        ("COMPONENTDESCRIPTION", escape_text(symbol.description)),
        ("PARTCOUNT", "1"),
        ("DISPLAYMODECOUNT", "1"),
        ("INDEXINSHEET", "-1"),
        ("OWNERPARTID", "-1"),
        ("LOCATION.X", "0"),
        ("LOCATION.Y", "0"),
        ("LIBRARYPATH", "*"),
        ("SOURCELIBRARYNAME", "*"),
        ("TARGETFILENAME", "*"),
    ))
    owner = len(body)  # header is record 0

    body.extend(_rectangle_record(r, owner) for r in symbol.rectangles)
    body.extend(_line_record(ln, owner) for ln in symbol.lines)
    body.extend(_label_record(t, owner) for t in symbol.labels)
    body.extend(_pin_record(p, owner) for p in symbol.pins)

    header: Record = (
        ("HEADER", SCHLIB_HEADER),
        ("WEIGHT", str(len(body))),
        ("MINORVERSION", "2"),
        ("USEMBCS", "T"),
    )
    return (header, *body)


# ── PcbLib ───────────────────────────────────────────────────────────────────

def _pad_record(pad: AltiumPad, owner: int) -> Record:
    fields = [
        ("RECORD", "3"),
        ("OWNERINDEX", str(owner)),
        ("LAYER", pad.layer),
        ("X", format_mil(pad.x)),
        ("Y", format_mil(pad.y)),
        ("XSIZE", format_mil(pad.x_size)),
        ("YSIZE", format_mil(pad.y_size)),
        ("HOLESIZE", format_mil(pad.hole_size)),
        ("SHAPE", str(pad.shape)),
        ("PADMODE", "0"),
        ("PLATED", _bool(pad.plated)),
        ("NAME", escape_text(pad.name)),
    ]
    if pad.rotation:
        fields.append(("ROTATION", format_number(pad.rotation)))
    return tuple(fields)


def build_pcblib_records(footprint: AltiumFootprint) -> tuple[Record, ...]:
    """Build the full record sequence of a single-footprint PcbLib."""
    body: list[Record] = []
    body.append((
        ("RECORD", "2"),
        ("NAME", escape_text(footprint.name)),
        ("DESCRIPTION", escape_text(footprint.description)),
    ))
    owner = 0  # footprint record; the header is not counted

    body.extend(_pad_record(pad, owner) for pad in footprint.pads)
    for track in footprint.tracks:
        body.append((
            ("RECORD", "6"),
            ("OWNERINDEX", str(owner)),
            ("LAYER", track.layer),
            ("START.X", format_mil(track.x1)),
            ("START.Y", format_mil(track.y1)),
            ("END.X", format_mil(track.x2)),
            ("END.Y", format_mil(track.y2)),
            ("WIDTH", format_mil(track.width)),
        ))
    for arc in footprint.arcs:
        body.append((
            ("RECORD", "7"),
            ("OWNERINDEX", str(owner)),
            ("LAYER", arc.layer),
            ("LOCATION.X", format_mil(arc.x)),
            ("LOCATION.Y", format_mil(arc.y)),
            ("RADIUS", format_mil(arc.radius)),
            ("STARTANGLE", format_number(arc.start_angle)),
            ("ENDANGLE", format_number(arc.end_angle)),
            ("WIDTH", format_mil(arc.width)),
        ))
    for text in footprint.texts:
        body.append((
            ("RECORD", "8"),
            ("OWNERINDEX", str(owner)),
            ("LAYER", text.layer),
            ("X", format_mil(text.x)),
            ("Y", format_mil(text.y)),
            ("TEXT", escape_text(text.text)),
            ("HEIGHT", format_mil(text.height)),
            ("WIDTH", format_mil(text.width)),
            ("ROTATION", format_number(text.rotation)),
            ("FONTID", "1"),
        ))
    if footprint.model is not None:
        model = footprint.model
        body.append((
            ("RECORD", "16"),
            ("OWNERINDEX", str(owner)),
            ("MODELNAME", escape_text(model.name)),
            ("MODELID", model.model_id),
            ("MODELDESCRIPTION", ""),
            ("ROTATION.X", format_number(model.rotation[0])),
            ("ROTATION.Y", format_number(model.rotation[1])),
            ("ROTATION.Z", format_number(model.rotation[2])),
            ("Z", format_mil(model.z)),
            ("CHECKSUM", ""),
            ("EMBEDSTEP", "F"),
        ))

    header: Record = (
        ("HEADER", PCBLIB_HEADER),
        ("WEIGHT", str(len(body))),
    )
    return (header, *body)


# ── Files ────────────────────────────────────────────────────────────────────

def export_schlib(symbol: AltiumSymbol, path: str) -> str:
    """Write a SchLib file atomically. Returns the path written."""
    records = build_schlib_records(symbol)
    write_atomic(path, render_records(records))
    logger.info("Exported SchLib %s (%d records)", path, len(records))
    return path


def export_pcblib(footprint: AltiumFootprint, path: str) -> str:
    """Write a PcbLib file atomically. Returns the path written."""
    records = build_pcblib_records(footprint)
    write_atomic(path, render_records(records))
    logger.info("Exported PcbLib %s (%d records)", path, len(records))
    return path
