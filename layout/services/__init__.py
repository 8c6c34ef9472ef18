"""Source acquisition services."""
