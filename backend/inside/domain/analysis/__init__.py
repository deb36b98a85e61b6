"""Safety analysis bounded context."""
