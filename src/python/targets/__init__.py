"""Output targets — each converts a canonical component and writes its files."""

from models import Target
from targets.base import BaseTarget
from targets.altium import AltiumTarget
from targets.kicad import KicadTarget

TARGET_MAP: dict[Target, type[BaseTarget]] = {
    Target.ALTIUM: AltiumTarget,
    Target.KICAD: KicadTarget,
}


def get_target(target: Target) -> BaseTarget:
    """Factory to get the handler for an output target."""
    return TARGET_MAP[target]()
