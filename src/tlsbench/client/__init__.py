"""Load-generating client."""
