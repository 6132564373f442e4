"""Application configuration (see config.settings)."""
