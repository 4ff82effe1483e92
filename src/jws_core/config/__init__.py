"""Settings for key generation and message defaults."""
