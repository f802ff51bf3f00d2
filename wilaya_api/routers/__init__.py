# Routers package for the wilayas API

from . import estimate, wilayas

__all__ = [
    "estimate",
    "wilayas",
]
