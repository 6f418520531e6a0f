"""JSON, hashing, response parsing and transcript helpers."""
