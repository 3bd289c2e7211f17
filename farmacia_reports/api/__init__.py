"""HTTP routes exposing report exports."""
