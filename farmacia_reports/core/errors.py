"""Error taxonomy of the report engine."""
from __future__ import annotations


class ReportError(RuntimeError):
    """Base class for report generation failures."""


class InputError(ReportError):
    """Empty or malformed dataset.

    Recovered where it is raised: charts fall back to a placeholder panel and
    malformed records are dropped from the report.
    """


class AssetError(ReportError):
    """A decorative image (logo, background) could not be loaded.

    Never raised across the builder boundary; the asset draw step returns it
    so that the builder can log it and keep drawing.
    """

    def __init__(self, asset: str, reason: str) -> None:
        super().__init__(f"Recurso '{asset}' no disponible: {reason}")
        self.asset = asset
        self.reason = reason


class LayoutOverflowError(ReportError):
    """A section needs more room than an empty page can ever provide."""

    def __init__(self, section: str, required: float, available: float) -> None:
        super().__init__(
            f"La sección '{section}' requiere {required:.1f} mm pero la página solo ofrece {available:.1f} mm."
        )
        self.section = section
        self.required = required
        self.available = available


__all__ = ["ReportError", "InputError", "AssetError", "LayoutOverflowError"]
