"""Application layer: request DTOs and use-case services."""
