"""HTTP-facing helpers shared by the API service."""
