"""Reviewer role table, venue context and prompt construction."""
