"""
Client Module - Optimistic execution on top of server confirmations.
"""

from .projection import OptimisticProjection, replay

__all__ = [
    "OptimisticProjection",
    "replay",
]
