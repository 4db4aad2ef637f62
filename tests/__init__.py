"""Flight logbook test suite."""
