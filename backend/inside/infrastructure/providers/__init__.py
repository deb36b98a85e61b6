"""Provider adapters and environment-based factory."""
