"""Version-independent API building blocks."""
