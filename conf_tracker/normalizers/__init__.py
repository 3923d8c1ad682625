"""Normalizers for catalog timestamps, topics and locations."""
