"""AI Super Hub desktop client: authentication and session lifecycle."""

__version__ = "1.0.0"
