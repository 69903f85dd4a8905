"""Configuration, error taxonomy and startup helpers."""
