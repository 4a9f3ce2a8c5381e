"""Exception hierarchy for the multislit renderer.

All errors raised by the core derive from ``MultislitError`` so hosts can
catch them in one place. Dimension and geometry errors are also
``ValueError`` subclasses; they are raised at call entry, before any buffer
is allocated.
"""


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class MultislitError(Exception):
    """Base exception for all multislit simulator errors."""

    pass


class InvalidDimensions(MultislitError, ValueError):
    """Requested image width or height is negative or not an integer."""

    pass


class InvalidGeometry(MultislitError, ValueError):
    """Slit geometry, scale or brightness outside their valid ranges."""

    pass


class RenderCancelled(MultislitError):
    """The working pixel buffer was released before the render finished."""

    pass


class ConfigError(MultislitError, ValueError):
    """A configuration file failed to load or validate."""

    pass
