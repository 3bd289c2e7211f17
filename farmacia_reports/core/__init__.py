"""Core settings, models and errors."""
