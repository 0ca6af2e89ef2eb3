"""
Test Utilities Package

Shared fakes for statsprobe tests:
- Call-counting connection with failure injection (fakes.py)
- Recording sleep and value sequences for deterministic polling
- JSON Lines event log reader
"""

from .fakes import (
    CountingConnection,
    ConnectionSourceSpy,
    RecordingSleep,
    ValueSequence,
    cache_object,
    channel_object,
    read_events,
)

__all__ = [
    "CountingConnection",
    "ConnectionSourceSpy",
    "RecordingSleep",
    "ValueSequence",
    "cache_object",
    "channel_object",
    "read_events",
]
