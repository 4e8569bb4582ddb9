"""Core configuration, security, logging and shared helpers."""
