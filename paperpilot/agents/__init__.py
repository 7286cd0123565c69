"""Reviewer personas, the comparative benchmark agent and writing-assistant calls."""
