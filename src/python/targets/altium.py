"""Altium target: one .SchLib and one .PcbLib per component."""

import os

from config import ConverterConfig
from library import OutputLayout, ensure_library_dirs
from models import Component, Target
from targets.altium_convert import convert_footprint, convert_symbol
from targets.altium_export import export_pcblib, export_schlib
from targets.base import BaseTarget, ConvertedComponent


class AltiumTarget(BaseTarget):

    target = Target.ALTIUM

    def convert(self, component: Component, config: ConverterConfig) -> ConvertedComponent:
        symbol, warnings = convert_symbol(component.symbol, config)
        footprint = None
        if component.footprint is not None:
            footprint, fp_warnings = convert_footprint(component.footprint,
                                                       component.identity, config)
            warnings.extend(fp_warnings)
        return ConvertedComponent(
            target=self.target,
            stem=self._stem(component),
            symbol=symbol,
            footprint=footprint,
            model_filename=footprint.model.name if footprint and footprint.model else None,
            warnings=warnings,
        )

    def write(self, converted: ConvertedComponent, layout: OutputLayout) -> list[str]:
        ensure_library_dirs(layout, self.target)
        files = [export_schlib(converted.symbol,
                               os.path.join(layout.altium_dir, f"{converted.stem}.SchLib"))]
        if converted.footprint is not None:
            files.append(export_pcblib(converted.footprint,
                                       os.path.join(layout.altium_dir, f"{converted.stem}.PcbLib")))
        return files
