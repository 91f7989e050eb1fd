"""Data models for extracted images and run configuration."""
