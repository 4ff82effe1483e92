"""Encoding helpers."""
