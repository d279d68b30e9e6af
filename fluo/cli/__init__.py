"""Command-line interface for Fluo configuration."""
