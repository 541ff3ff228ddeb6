"""LcscBridge — EasyEDA/LCSC component conversion pipeline and CLI."""

import argparse
import logging
import sys
from typing import Iterable, Optional

from config import DEFAULT_CONFIG, ConverterConfig
from easyeda import parse_component
from errors import ConversionError, ParseError
from library import OutputLayout
from models import Component, ConversionResult, Target
from targets import get_target
from targets.kicad_export import merge_symbol_library

logger = logging.getLogger(__name__)

DEFAULT_TARGETS = (Target.ALTIUM, Target.KICAD)


def export_component(component: Component, output_dir: str,
                     targets: Iterable[Target] = DEFAULT_TARGETS,
                     config: Optional[ConverterConfig] = None,
                     model_path: Optional[str] = None) -> ConversionResult:
    """Convert a canonical component to each target and write its files.

    Steps: convert every target (no I/O) -> write files -> copy 3D model.
    A failure aborts this component only and is returned as an error result.
    """
    config = config or DEFAULT_CONFIG
    layout = OutputLayout(output_dir, config.library_name)
    warnings = list(component.warnings)
    files: list[str] = []

    try:
        # Every target converts before any file is written.
        converted = []
        for target in targets:
            handler = get_target(target)
            converted.append((handler, handler.convert(component, config)))

        for handler, result in converted:
            files.extend(handler.export(result, layout, model_path))
            warnings.extend(f"{handler.target.value}: {w}" for w in result.warnings)

    except ConversionError as e:
        logger.error("Converting %s failed: %s", component.identity, e)
        return ConversionResult(
            status="error",
            name=component.name,
            identity=component.identity,
            files=files,
            warnings=warnings,
            error=str(e),
            error_kind=e.kind,
        )

    logger.info("Converted %s: %d files, %d warnings",
                component.identity, len(files), len(warnings))
    return ConversionResult(
        status="success",
        name=component.name,
        identity=component.identity,
        files=files,
        warnings=warnings,
    )


def convert_component(payload, output_dir: str,
                      targets: Iterable[Target] = DEFAULT_TARGETS,
                      config: Optional[ConverterConfig] = None,
                      model_path: Optional[str] = None,
                      lcsc_id: Optional[str] = None) -> ConversionResult:
    """Parse a catalog payload (JSON text or dict) and export it.

    Steps: parse -> normalize/convert per target -> write files
    """
    try:
        component = parse_component(payload, lcsc_id)
    except ParseError as e:
        logger.error("Parsing %s failed: %s", lcsc_id or "component", e)
        return ConversionResult(
            status="error",
            identity=lcsc_id,
            error=str(e),
            error_kind=e.kind,
        )
    return export_component(component, output_dir, targets, config, model_path)


# ── CLI ──────────────────────────────────────────────────────────────────────

def _print_result(result: ConversionResult) -> None:
    print(f"Status: {result.status}")
    if result.identity:
        print(f"Component: {result.identity}")
    if result.name:
        print(f"Name: {result.name}")
    for path in result.files:
        print(f"Wrote: {path}")
    for w in result.warnings:
        print(f"Warning: {w}")
    if result.error:
        print(f"Error: {result.error}")


def main():
    parser = argparse.ArgumentParser(
        description="LcscBridge — convert EasyEDA/LCSC components to KiCad and Altium libraries"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # convert command
    conv = subparsers.add_parser("convert", help="Convert a component JSON file")
    conv.add_argument("payload", help="Path to the component JSON (catalog response)")
    conv.add_argument("-o", "--output", required=True, help="Output directory")
    conv.add_argument("-t", "--target", action="append",
                      choices=[t.value for t in Target],
                      help="Target to export (repeatable, default: all)")
    conv.add_argument("--model", help="Path to the component's 3D model file")
    conv.add_argument("--config", help="JSON file with converter settings")
    conv.add_argument("--lcsc-id", help="LCSC part number of the component")

    # merge command
    merge = subparsers.add_parser("merge", help="Merge a .kicad_sym into a shared symbol library")
    merge.add_argument("symbol_file", help="Per-component .kicad_sym file")
    merge.add_argument("library", help="Shared .kicad_sym library (created if missing)")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "convert":
        try:
            config = ConverterConfig.from_file(args.config) if args.config else DEFAULT_CONFIG
            with open(args.payload, 'rb') as f:
                payload = f.read()
        except (OSError, ValueError) as e:
            print(f"Error: {e}")
            sys.exit(1)
        targets = [Target(t) for t in args.target] if args.target else list(DEFAULT_TARGETS)
        result = convert_component(
            payload,
            args.output,
            targets=targets,
            config=config,
            model_path=args.model,
            lcsc_id=args.lcsc_id,
        )
        _print_result(result)
        if result.status != "success":
            sys.exit(1)

    elif args.command == "merge":
        try:
            names = merge_symbol_library(args.symbol_file, args.library)
        except (OSError, ConversionError) as e:
            print(f"Error: {e}")
            sys.exit(1)
        print(f"Merged: {', '.join(names)}")

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
