"""JSON extraction from free-text model completions."""
