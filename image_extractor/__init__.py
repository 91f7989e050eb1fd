"""Build-time replacement of remote images with local copies for static sites."""

__version__ = "0.1.0"
