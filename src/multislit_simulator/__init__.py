"""Multislit diffraction renderer.

Renders the Fraunhofer N-slit interference pattern of one or more
monochromatic light sources into an 8-bit RGB pixel buffer.

Modules:
    - configuration: immutable slit geometry, light sources, display settings
    - intensity: vectorized N-slit kernel with window averaging (quality)
    - pixel_buffer: clamped uint8 RGB buffer with release/cancel flag
    - renderer: frame assembler (envelope, tiling, thread pool, progress)
    - config_loader: multislit.v1 YAML load/save
    - errors: exception hierarchy

Invariants:
    - Column colors are linear and unclamped; clamping happens at write time
    - Each pixel is written by exactly one tile, so output is deterministic
    - A cancelled render raises RenderCancelled and never returns pixels

Used by:
    - scripts/render_pattern.py: command-line host
"""

from .configuration import Configuration, SlitGeometry, WavelengthColorPair
from .errors import (
    ConfigError,
    InvalidDimensions,
    InvalidGeometry,
    MultislitError,
    RenderCancelled,
)
from .pixel_buffer import PixelBuffer
from .renderer import FrameAssembler, ProgressProvider, render, render_highres, save_image

__all__ = [
    'Configuration',
    'SlitGeometry',
    'WavelengthColorPair',
    'ConfigError',
    'InvalidDimensions',
    'InvalidGeometry',
    'MultislitError',
    'RenderCancelled',
    'PixelBuffer',
    'FrameAssembler',
    'ProgressProvider',
    'render',
    'render_highres',
    'save_image',
]
