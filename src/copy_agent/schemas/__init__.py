"""Pydantic schemas for task input, phase artifacts and check results."""
