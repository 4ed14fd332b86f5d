from .base import SearchProviderProtocol

__all__ = ["SearchProviderProtocol"]
