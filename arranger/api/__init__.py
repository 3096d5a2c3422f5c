"""HTTP API for Canvas Arranger."""
