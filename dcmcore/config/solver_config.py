from dataclasses import dataclass

@dataclass
class PrecisionConfig:
    """Numerical tolerances shared by comparisons and diagnostic checks."""

    approx_precision: float = 1e-10        # Transform.is_approx default
    finite_difference_step: float = 1e-6   # step for central / forward differences
    gradient_tolerance: float = 1e-6       # analytic vs numeric gradient agreement
    frame_tolerance: float = 1e-10         # local <-> global round-trip check

    def __post_init__(self):
        """Reject tolerances that would make every check trivially pass or fail."""
        for name in ('approx_precision', 'finite_difference_step',
                     'gradient_tolerance', 'frame_tolerance'):
            value = getattr(self, name)
            if not value > 0.0:
                raise ValueError(f"{name} must be positive, got {value}")

# Default instance used when callers do not pass their own configuration
DEFAULT_PRECISION = PrecisionConfig()
