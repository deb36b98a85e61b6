"""AI backends and prompts."""
