"""Application-wide settings."""
