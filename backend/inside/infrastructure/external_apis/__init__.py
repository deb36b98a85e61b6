"""External HTTP APIs."""
