"""HTTP API for the take-home pay calculator."""
