from .providers import Provider

__all__ = ["Provider"]
