"""Reusable widgets shared by the auth screens."""
