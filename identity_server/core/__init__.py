"""Core configuration, security and shared services."""
