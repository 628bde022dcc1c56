"""lectiod - configuration-driven URL harvesting policy service."""
