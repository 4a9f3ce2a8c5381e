"""Shared helpers below the renderer (lowest dependency layer).

Modules:
    - color: RgbColor and the wavelength → RGB spectrum map
    - compute: pixel/metre conversions, column tiling, kernel sub-samples
    - fs: atomic image/YAML writes
    - validators: pydantic models for multislit.v1 files
    - profiler: wall-clock timer
    - logging_config: root logger setup and context fields

Nothing here imports from src.multislit_simulator or scripts.

    from src.utils import color, compute, fs
    from src.utils import setup_logging, render_context
"""

from . import color, compute, fs, logging_config, profiler, validators
from .logging_config import get_logger, push_context, render_context, setup_logging

__all__ = [
    'color',
    'compute',
    'fs',
    'logging_config',
    'profiler',
    'validators',
    'get_logger',
    'push_context',
    'render_context',
    'setup_logging',
]
