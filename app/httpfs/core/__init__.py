"""Configuration and application paths for httpfs."""
