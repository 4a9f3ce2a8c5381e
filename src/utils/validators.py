"""YAML schema validation for multislit configurations.

Provides pydantic models for the ``multislit.v1`` configuration file:
    - SlitsV1: slit count, width, spacing, screen distance (metres)
    - LightSourceV1: wavelength (nm) with an optional explicit color
    - MultislitV1: full render configuration; ``spectrum_step_nm`` appends
      evenly spaced visible-band sources to ``light_sources``

All loaders validate with these models for fail-fast error detection with
actionable messages (offending key, expected range).

Units:
    - Geometry: metres
    - Wavelength: nanometres, visible band [380, 780]
    - Color: linear RGB on the 0..255 scale (unclamped, >= 0)
    - Scale: pixels per screen-plane metre

Example file::

    schema: multislit.v1
    slits:
      slit_count: 2
      slit_width: 2.0e-5
      slit_spacing: 1.0e-4
      screen_distance: 1.0
    light_sources:
      - wavelength_nm: 550
      - wavelength_nm: 650
        color: [255, 0, 0]
    scale: 20000
    brightness: 1.0
    display_distribution: false
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# MULTISLIT SCHEMA V1
# ============================================================================

class SlitsV1(BaseModel):
    """Slit barrier geometry (metres)."""
    slit_count: int = Field(..., ge=1, description="Number of slits")
    slit_width: float = Field(..., gt=0.0, description="Width of each slit (m)")
    slit_spacing: float = Field(..., gt=0.0, description="Centre-to-centre spacing (m)")
    screen_distance: float = Field(..., gt=0.0, description="Barrier to screen distance (m)")


class LightSourceV1(BaseModel):
    """Monochromatic light source."""
    wavelength_nm: float = Field(..., ge=380.0, le=780.0, description="Wavelength (nm)")
    color: Optional[Tuple[float, float, float]] = Field(
        None, description="Linear RGB (0..255); spectrum color when omitted"
    )

    @field_validator('color')
    @classmethod
    def validate_color(cls, v: Optional[Tuple[float, float, float]]):
        if v is not None and any(c < 0.0 for c in v):
            raise ValueError(f"Color channels must be >= 0, got {v}")
        return v


class MultislitV1(BaseModel):
    """Complete render configuration (multislit.v1 schema)."""
    model_config = ConfigDict(populate_by_name=True, extra='forbid')

    schema_version: str = Field("multislit.v1", alias="schema", description="Schema version")
    slits: SlitsV1
    light_sources: List[LightSourceV1] = Field(default_factory=list)
    scale: float = Field(20000.0, gt=0.0, description="Pixels per screen-plane metre")
    brightness: float = Field(1.0, ge=0.0, description="Global linear gain")
    display_distribution: bool = Field(False, description="Skip the vertical envelope")
    sampling_radius: float = Field(1.0, gt=0.0, description="Kernel averaging half-width (m)")
    spectrum_step_nm: Optional[float] = Field(
        None, gt=0.0, le=400.0,
        description="Also add visible-band sources every N nm (white light)"
    )

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "multislit.v1":
            raise ValueError(f"Expected schema 'multislit.v1', got '{v}'")
        return v


# ============================================================================
# PUBLIC API
# ============================================================================

def validate_multislit_dict(data: Dict[str, Any]) -> MultislitV1:
    """Validate a parsed configuration mapping.

    Raises
    ------
    ValueError
        If ``data`` is not a mapping or validation fails
    """
    if not isinstance(data, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")
    try:
        return MultislitV1(**data)
    except Exception as e:
        raise ValueError(f"Multislit config validation failed: {e}") from e
