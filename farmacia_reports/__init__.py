"""Report rendering engine for the Farmacias Brasil back office."""

__version__ = "1.0.0"
