"""Backend access helpers."""
