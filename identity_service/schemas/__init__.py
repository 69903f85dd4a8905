"""Request and error payload schemas."""
