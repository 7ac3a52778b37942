"""Pydantic schemas for the API surface."""
