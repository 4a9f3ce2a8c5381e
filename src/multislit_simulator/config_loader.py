"""Load and save multislit configurations as YAML.

Files follow the ``multislit.v1`` schema validated by
``src.utils.validators``. Light sources listed with only a wavelength get
their color from the spectrum map. ``spectrum_step_nm`` expands into one
source per visible-band sample (approximate white light); dumped files list
those sources explicitly.

Usage::

    from src.multislit_simulator.config_loader import load_configuration
    cfg = load_configuration()                          # shipped double slit
    cfg = load_configuration("configs/white_light_grating_v1.yaml")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from src.multislit_simulator.configuration import (
    Configuration,
    SlitGeometry,
    WavelengthColorPair,
)
from src.multislit_simulator.errors import ConfigError
from src.utils import fs, validators
from src.utils.color import RgbColor, visible_spectrum, wavelength_to_rgb

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "double_slit_v1.yaml"


def configuration_from_model(model: validators.MultislitV1) -> Configuration:
    """Build a frozen Configuration from a validated schema model."""
    sources = []
    for source in model.light_sources:
        if source.color is None:
            color = wavelength_to_rgb(source.wavelength_nm)
        else:
            color = RgbColor(*source.color)
        sources.append(WavelengthColorPair(source.wavelength_nm, color))
    if model.spectrum_step_nm is not None:
        sources.extend(
            WavelengthColorPair(wl, color)
            for wl, color in visible_spectrum(model.spectrum_step_nm)
        )

    return Configuration(
        slits=SlitGeometry(
            slit_count=model.slits.slit_count,
            slit_width=model.slits.slit_width,
            slit_spacing=model.slits.slit_spacing,
            screen_distance=model.slits.screen_distance,
        ),
        light_sources=tuple(sources),
        scale=model.scale,
        brightness=model.brightness,
        display_distribution=model.display_distribution,
        sampling_radius=model.sampling_radius,
    )


def configuration_to_dict(cfg: Configuration) -> dict[str, Any]:
    """Serialize a Configuration to a ``multislit.v1`` mapping."""
    return {
        "schema": "multislit.v1",
        "slits": {
            "slit_count": int(cfg.slits.slit_count),
            "slit_width": float(cfg.slits.slit_width),
            "slit_spacing": float(cfg.slits.slit_spacing),
            "screen_distance": float(cfg.slits.screen_distance),
        },
        "light_sources": [
            {
                "wavelength_nm": float(source.wavelength_nm),
                "color": [float(c) for c in source.color.to_tuple()],
            }
            for source in cfg.light_sources
        ],
        "scale": float(cfg.scale),
        "brightness": float(cfg.brightness),
        "display_distribution": bool(cfg.display_distribution),
        "sampling_radius": float(cfg.sampling_radius),
    }


def load_configuration(path: str | Path | None = None) -> Configuration:
    """Load and validate a configuration file.

    Parameters
    ----------
    path : str | Path | None
        Path to a ``multislit.v1`` YAML file. ``None`` loads the shipped
        double-slit preset.

    Returns
    -------
    Configuration
        Frozen, validated configuration

    Raises
    ------
    ConfigError
        If the file is empty, malformed, or fails validation
    FileNotFoundError
        If *path* does not exist
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    try:
        data = fs.load_yaml(path)
    except yaml.YAMLError as e:
        raise ConfigError(str(e)) from e
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")

    try:
        model = validators.validate_multislit_dict(data)
    except ValueError as e:
        raise ConfigError(f"{path}: {e}") from e

    cfg = configuration_from_model(model)
    logger.debug(
        "Configuration: %d slits, %d sources, scale=%g",
        cfg.slits.slit_count, len(cfg.light_sources), cfg.scale
    )
    return cfg


def dump_configuration(cfg: Configuration, path: str | Path) -> Path:
    """Write a configuration to YAML atomically."""
    path = Path(path)
    fs.atomic_yaml_dump(configuration_to_dict(cfg), path)
    return path
