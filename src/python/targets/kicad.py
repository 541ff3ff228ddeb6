"""KiCad target: a per-component .kicad_sym plus a footprint in <library>.pretty."""

import os

from config import ConverterConfig
from library import OutputLayout, ensure_library_dirs
from models import Component, Target
from targets.base import BaseTarget, ConvertedComponent
from targets.kicad_convert import convert_footprint, convert_symbol
from targets.kicad_export import export_footprint, export_symbol_library


class KicadTarget(BaseTarget):

    target = Target.KICAD

    def convert(self, component: Component, config: ConverterConfig) -> ConvertedComponent:
        stem = self._stem(component)
        warnings: list[str] = []
        footprint = None
        footprint_ref = None
        if component.footprint is not None:
            # Footprint files are named after the component, not the package.
            footprint, warnings = convert_footprint(component.footprint, component.identity,
                                                    config, entry_name=stem)
            footprint_ref = f"{config.library_name}:{stem}"
        symbol, sym_warnings = convert_symbol(component.symbol, config,
                                              footprint_ref=footprint_ref,
                                              identity=component.identity)
        has_model = component.footprint is not None and component.footprint.model is not None
        return ConvertedComponent(
            target=self.target,
            stem=stem,
            symbol=symbol,
            footprint=footprint,
            model_filename=component.footprint.model.filename if has_model else None,
            warnings=sym_warnings + warnings,
        )

    def write(self, converted: ConvertedComponent, layout: OutputLayout) -> list[str]:
        ensure_library_dirs(layout, self.target)
        files = [export_symbol_library(
            converted.symbol, os.path.join(layout.kicad_dir, f"{converted.stem}.kicad_sym"))]
        if converted.footprint is not None:
            files.append(export_footprint(
                converted.footprint,
                os.path.join(layout.footprint_dir, f"{converted.stem}.kicad_mod")))
        return files
