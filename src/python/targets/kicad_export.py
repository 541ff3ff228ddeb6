"""Writes kiutils objects as .kicad_sym / .kicad_mod files."""

import logging
import os

from kiutils.footprint import Footprint as KiFootprint
from kiutils.symbol import Symbol as KiSymbol
from kiutils.symbol import SymbolLib

from library import write_atomic
from targets.kicad_convert import GENERATOR, KICAD_VERSION

logger = logging.getLogger(__name__)


def export_symbol_library(symbol: KiSymbol, path: str) -> str:
    """Write a single-symbol library atomically. Returns the path written."""
    lib = SymbolLib(version=KICAD_VERSION, generator=GENERATOR, symbols=[symbol])
    write_atomic(path, lib.to_sexpr())
    logger.info("Exported symbol %s to %s", symbol.entryName, path)
    return path


def export_footprint(footprint: KiFootprint, path: str) -> str:
    """Write a footprint file atomically. Returns the path written."""
    write_atomic(path, footprint.to_sexpr())
    logger.info("Exported footprint %s to %s", footprint.entryName, path)
    return path


def merge_symbol_library(symbol_file: str, library_path: str) -> list[str]:
    """Fold the symbols of ``symbol_file`` into a shared library.

    A symbol already in the library with the same name is replaced. Returns
    the names merged. Callers merging from several workers must serialize
    calls for the same library.
    """
    source = SymbolLib.from_file(symbol_file)
    if os.path.exists(library_path):
        target = SymbolLib.from_file(library_path)
    else:
        target = SymbolLib(version=KICAD_VERSION, generator=GENERATOR)

    names = [s.entryName for s in source.symbols]
    target.symbols = [s for s in target.symbols if s.entryName not in names]
    target.symbols.extend(source.symbols)
    write_atomic(library_path, target.to_sexpr())
    logger.info("Merged %s into %s", ", ".join(names), library_path)
    return names
