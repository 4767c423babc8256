"""HTTP API for Dreamverse."""
