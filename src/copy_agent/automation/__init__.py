"""Model clients, structured generation and fan-out helpers."""
