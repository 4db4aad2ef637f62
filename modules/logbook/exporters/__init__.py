"""Table exporters."""
