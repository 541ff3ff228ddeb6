"""Output directory layout, atomic writes and 3D model passthrough."""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass

from errors import ExportIOError
from models import Target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputLayout:
    """Where each target's files live under the caller's output directory."""
    root: str
    library_name: str = "lcscbridge"

    @property
    def altium_dir(self) -> str:
        return os.path.join(self.root, "altium")

    @property
    def altium_models_dir(self) -> str:
        return os.path.join(self.altium_dir, "3D")

    @property
    def kicad_dir(self) -> str:
        return os.path.join(self.root, "kicad")

    @property
    def footprint_dir(self) -> str:
        return os.path.join(self.kicad_dir, f"{self.library_name}.pretty")

    @property
    def kicad_models_dir(self) -> str:
        return os.path.join(self.kicad_dir, f"{self.library_name}.3dshapes")

    def models_dir(self, target: Target) -> str:
        return self.altium_models_dir if target is Target.ALTIUM else self.kicad_models_dir


def ensure_library_dirs(layout: OutputLayout, target: Target) -> None:
    """Create the directory structure for a target if it doesn't exist."""
    if target is Target.ALTIUM:
        dirs = (layout.altium_dir,)
    else:
        dirs = (layout.kicad_dir, layout.footprint_dir)
    try:
        for d in dirs:
            os.makedirs(d, exist_ok=True)
    except OSError as e:
        raise ExportIOError(d, e) from e


def _replace_into(path: str, fill) -> None:
    """Create a temp file next to ``path``, let ``fill`` write it, then rename.

    The destination is either the previous file or the complete new one.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", dir=directory)
        os.close(fd)
        fill(tmp_path)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise ExportIOError(path, e) from e


def write_atomic(path: str, content: str) -> str:
    """Write text to ``path`` atomically as UTF-8 with ``\\n`` line endings."""
    data = content.encode("utf-8")

    def fill(tmp_path: str) -> None:
        with open(tmp_path, 'wb') as f:
            f.write(data)

    _replace_into(path, fill)
    logger.debug("Wrote %s (%d bytes)", path, len(data))
    return path


def copy_model(source: str, dest_dir: str, filename: str) -> str:
    """Copy a 3D model file byte for byte into ``dest_dir`` under ``filename``."""
    dest = os.path.join(dest_dir, filename)
    _replace_into(dest, lambda tmp_path: shutil.copy2(source, tmp_path))
    logger.debug("Copied 3D model %s -> %s", source, dest)
    return dest
