"""Background workers for the ticket hold service."""

from .expiration_scheduler import ExpirationScheduler

__all__ = ["ExpirationScheduler"]
