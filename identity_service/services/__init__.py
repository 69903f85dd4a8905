"""Use cases exposed to the API layer."""
