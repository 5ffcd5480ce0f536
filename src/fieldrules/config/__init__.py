"""Configuration — section models, ``fieldrules.toml`` discovery, settings, logging."""
