"""Infrastructure adapters (HTTP client construction)."""
