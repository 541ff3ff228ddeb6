"""EasyEDA/LCSC catalog payload parsing."""

from easyeda.parser import load_payload, parse_component, parse_footprint, parse_symbol

__all__ = ["load_payload", "parse_component", "parse_footprint", "parse_symbol"]
