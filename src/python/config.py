"""Converter configuration."""

import json
from dataclasses import dataclass, fields, replace
from enum import Enum


class Anchor(Enum):
    SOURCE_ORIGIN = "source_origin"  # canvas origin declared by the source
    CENTER = "center"  # centre of the bounding box of all primitives


@dataclass(frozen=True)
class ConverterConfig:
    """Defaults and scales used by the converters.

    Values are only applied when the source omits a field; a value present
    in the source always wins.
    """
    default_pin_length_mil: int = 100
    symbol_unit_mil: float = 100.0  # one schematic grid unit, in mil
    footprint_unit_mm: float = 1.0  # one footprint source unit, in mm
    anchor: Anchor = Anchor.SOURCE_ORIGIN
    add_default_body: bool = True
    default_body_padding_mil: int = 50
    library_name: str = "lcscbridge"
    model_path_var: str = "LCSCBRIDGE_3DMODELS"  # KiCad path variable for 3D models

    @classmethod
    def from_dict(cls, data: dict) -> "ConverterConfig":
        """Build a config from a plain dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        values = dict(data)
        if "anchor" in values:
            values["anchor"] = Anchor(values["anchor"])
        return replace(cls(), **values)

    @classmethod
    def from_file(cls, path: str) -> "ConverterConfig":
        """Load a config from a JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return cls.from_dict(data)


DEFAULT_CONFIG = ConverterConfig()
