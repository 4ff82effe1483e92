"""Key material, certificate chains and the error taxonomy."""
