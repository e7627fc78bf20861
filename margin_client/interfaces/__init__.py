"""Protocol interfaces for the margin client."""
from .chain import ChainClient

__all__ = ["ChainClient"]
