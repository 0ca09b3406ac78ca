"""Fan, LED animation, charging and performance-profile control for TUXEDO laptops."""

__version__ = "0.1.0"

__all__ = ["__version__"]