"""Version information for gslock."""

__version__ = "1.0.0"
