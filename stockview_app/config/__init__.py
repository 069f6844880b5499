"""Configuration defaults, YAML overrides and validation."""
