"""Core configuration and cross-cutting concerns."""
