"""Data models: algorithm tags, JWKs and JWS headers."""
