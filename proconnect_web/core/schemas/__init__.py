"""Pydantic schemas for auth and contact-reveal payloads."""
