# Web package
"""FastAPI JSON API for the standup reporting system."""
