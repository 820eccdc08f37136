"""TaskFlow - per-user task tracking on top of Firestore."""

__version__ = "0.1.0"
