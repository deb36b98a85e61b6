"""Application layer: use-case orchestrators."""
