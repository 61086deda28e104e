"""FarmGuard crop image analysis and wildlife deterrent service."""

__version__ = "0.1.0"
