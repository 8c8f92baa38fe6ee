"""I/O channels."""
