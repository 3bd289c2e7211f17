"""Report generation services."""
