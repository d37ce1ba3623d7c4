"""HTTP API for the file registry."""
