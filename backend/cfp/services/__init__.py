"""Business services (no transaction management)."""
