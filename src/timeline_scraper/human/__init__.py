"""human — human-like scrolling for browser automation."""
from .behavior import drift_pointer, inertial_wheel, human_scroll  # noqa: F401
