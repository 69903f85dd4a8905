"""Storage port for user records and its implementations."""
