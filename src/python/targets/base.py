"""Base target with common helpers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from config import ConverterConfig
from library import OutputLayout, copy_model
from models import Component, Target
from normalizer import sanitize_name

logger = logging.getLogger(__name__)


@dataclass
class ConvertedComponent:
    """Target structures for one component, ready to be written."""
    target: Target
    stem: str  # file name stem shared by every file of the component
    symbol: Any
    footprint: Optional[Any] = None
    model_filename: Optional[str] = None
    warnings: list[str] = field(default_factory=list)


class BaseTarget(ABC):
    """Abstract base class for output targets."""

    target: Target

    @abstractmethod
    def convert(self, component: Component, config: ConverterConfig) -> ConvertedComponent:
        """Map a canonical component to this target's structures. No I/O."""
        ...

    @abstractmethod
    def write(self, converted: ConvertedComponent, layout: OutputLayout) -> list[str]:
        """Write the converted structures. Returns the paths written."""
        ...

    def export(self, converted: ConvertedComponent, layout: OutputLayout,
               model_path: Optional[str] = None) -> list[str]:
        """Write a converted component and copy its 3D model, if provided."""
        files = self.write(converted, layout)
        if converted.model_filename and model_path:
            files.append(copy_model(model_path, layout.models_dir(self.target),
                                    converted.model_filename))
        elif converted.model_filename:
            message = ("3D model file not provided; "
                       f"only the placement of {converted.model_filename} was written")
            logger.warning("%s: %s", self.target.value, message)
            converted.warnings.append(message)
        return files

    def _stem(self, component: Component) -> str:
        return sanitize_name(component.name)
