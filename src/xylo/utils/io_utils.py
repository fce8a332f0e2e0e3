"""
Centralized file I/O utilities.

- Single place for encoding handling
- PNG encoding is delegated to Pillow; the core only produces pixel buffers
"""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .config import DEFAULT_FILE_ENCODING


def read_source_file(path: Union[Path, str]) -> str:
    """Read source file with standard encoding."""
    p = Path(path) if not isinstance(path, Path) else path
    return p.read_text(encoding=DEFAULT_FILE_ENCODING)


def write_png(path: Union[Path, str], pixels: np.ndarray) -> Path:
    """Encode an (H, W, 4) uint8 RGBA buffer as PNG."""
    p = Path(path) if not isinstance(path, Path) else path
    Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(p, format="PNG")
    return p
