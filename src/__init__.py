"""Multislit Simulator: N-slit diffraction pattern renderer.

This package renders the interference pattern produced when monochromatic
light sources shine through a multi-slit barrier onto a screen.

Architecture layers (strict one-way dependency):
    scripts/ → src/multislit_simulator/ → src/utils/

Key invariants:
    - Physical lengths in metres, wavelengths in nanometres
    - Colors are linear RGB on the 0..255 scale, unclamped until the pixel
      buffer write
    - Configurations are immutable for the duration of a render
    - YAML-only configs (multislit.v1 schema)
"""

__version__ = "1.0.0"
