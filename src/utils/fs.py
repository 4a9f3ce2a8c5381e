"""Atomic file output for rendered images and YAML configurations.

Every writer here goes through ``_atomic_replace``: the payload is written
to a sibling temporary file, flushed to disk, then renamed over the target.
A host polling the output directory therefore sees either the previous file
or the complete new one, never a partially encoded PNG.

Provides:
    - ensure_dir(): mkdir -p returning a Path
    - atomic_write_bytes(): raw payloads
    - atomic_save_image(): (H, W, 3) uint8 arrays through Pillow
    - atomic_yaml_dump() / load_yaml(): PyYAML safe dump/load

Usage:
    from src.utils import fs
    fs.atomic_save_image(buffer.snapshot(), "outputs/double_slit.png")
    fs.atomic_yaml_dump(cfg_dict, "outputs/double_slit.yaml")
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import numpy as np
import yaml
from PIL import Image

PathLike = Union[str, Path]


def ensure_dir(p: PathLike) -> Path:
    """Create ``p`` (and parents) if missing; return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def _atomic_replace(path: Path, tmp_path: Path, write: Callable[[Path], None]) -> None:
    """Run ``write(tmp_path)`` then rename the result onto ``path``.

    Raises
    ------
    RuntimeError
        If writing or renaming fails; the temporary file is removed first
    """
    ensure_dir(path.parent)
    try:
        write(tmp_path)
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def atomic_write_bytes(path: PathLike, data: bytes) -> None:
    """Write ``data`` to ``path`` atomically (tmp → fsync → rename)."""
    path = Path(path)

    def write(tmp: Path) -> None:
        with open(tmp, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

    _atomic_replace(path, path.with_suffix(path.suffix + ".tmp"), write)


def atomic_save_image(
    img: np.ndarray,
    path: PathLike,
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Encode an image array and move it into place atomically.

    Parameters
    ----------
    img : np.ndarray
        (H, W, 3), (H, W, 1) or (H, W) pixels. Non-uint8 data is clipped
        to [0, 255] and truncated.
    path : str or Path
        Destination; the extension selects the Pillow encoder
    pil_kwargs : dict, optional
        Extra keyword arguments for ``PIL.Image.Image.save``
        (e.g. ``{"compress_level": 9}``)

    Raises
    ------
    ValueError
        If the array has no pixels (zero width or height)
    RuntimeError
        If encoding or the final rename fails
    """
    path = Path(path)
    pixels = np.asarray(img)
    if pixels.size == 0:
        raise ValueError(f"Cannot save empty image to {path}")
    if pixels.dtype != np.uint8:
        pixels = np.clip(pixels, 0, 255).astype(np.uint8)
    if pixels.ndim == 3 and pixels.shape[2] == 1:
        pixels = pixels[..., 0]

    encoded = Image.fromarray(pixels)
    options = pil_kwargs or {}

    # The real extension stays last so Pillow can infer the format
    tmp_path = path.with_name(f"{path.stem}.tmp{path.suffix}")
    _atomic_replace(path, tmp_path, lambda tmp: encoded.save(tmp, **options))


def atomic_yaml_dump(obj: Any, path: PathLike) -> None:
    """Serialize ``obj`` with ``yaml.safe_dump`` (insertion key order) atomically."""
    text = yaml.safe_dump(obj, default_flow_style=False, sort_keys=False, allow_unicode=True)
    atomic_write_bytes(path, text.encode('utf-8'))


def load_yaml(path: PathLike) -> Any:
    """Parse a YAML file with ``yaml.safe_load``.

    Returns ``None`` for an empty file.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist
    yaml.YAMLError
        If the document is malformed; the message names the file
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"YAML file not found: {path}")

    text = path.read_text(encoding='utf-8')
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e
