"""Compact JWS objects."""
