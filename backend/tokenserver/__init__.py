"""Live Jupiter token snapshot server."""
