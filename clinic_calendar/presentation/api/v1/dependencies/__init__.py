"""API v1 dependency providers."""
