"""Education HTTP routes."""
