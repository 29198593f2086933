"""
Delivery Module - persistence and the command line front end.
"""

from netquiz.delivery.state_store import (
    MemoryStateRepository,
    SqlStateRepository,
    StateRepository,
    UserStateStore,
)

__all__ = [
    "MemoryStateRepository",
    "SqlStateRepository",
    "StateRepository",
    "UserStateStore",
]
