"""Walk-distance routing and labor analytics for warehouse layouts."""

__version__ = "1.0.0"
