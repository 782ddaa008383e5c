"""
API Routers Package
Exposes all route modules for the chatter service
"""

from . import markov_router
from . import bot_router

__all__ = [
    "markov_router",
    "bot_router",
]
