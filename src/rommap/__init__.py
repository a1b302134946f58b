"""rommap: relations over pluggable gateways, composable commands and mappers."""

from rommap.environment import Container, Setup, setup

__version__ = "0.1.0"

__all__ = ["Container", "Setup", "__version__", "setup"]
