"""Identity HTTP layer."""
