"""
Exceptions raised by the constraint core.

Only programming errors are reported this way: a zero scale, a parameter
vector of the wrong length, a geometry pair nobody registered, or a
direction mode a gradient routine cannot handle. Numerically degenerate
input (two exactly equal directions under SAME, for instance) is not
an error here; it shows up as a non-finite residual or gradient.
"""


class DcmError(Exception):
    """Base class for all errors raised by dcmcore."""
    pass


class TransformError(DcmError, ValueError):
    """Invalid transform input, e.g. a zero scale or a malformed rotation."""
    pass


class LayoutError(DcmError, ValueError):
    """A parameter vector does not match the layout of its geometry tag."""
    pass


class ConstraintSetupError(DcmError, KeyError):
    """No constraint functor is registered for the requested tag pair."""
    pass


class DirectionModeError(DcmError, ValueError):
    """The direction mode is not supported by the requested operation."""
    pass
