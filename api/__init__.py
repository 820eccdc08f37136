"""FastAPI service for TaskFlow."""
