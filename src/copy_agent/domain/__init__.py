"""Niche research: how businesses in a client's market actually write."""
