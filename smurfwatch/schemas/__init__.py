"""Pydantic schemas for match data and analysis results."""
