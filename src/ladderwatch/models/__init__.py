"""Pydantic models for clubs, seasons, teams, grades and ladders."""
