"""Live feed clients."""

from .gw2 import GW2Client

__all__ = ["GW2Client"]
