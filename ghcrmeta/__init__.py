"""Image metadata resolver for the ghcr.io/versa-node organization."""

__version__ = "1.0.0"
