# errors.py

"""
Exception taxonomy for stream checkpoints.

All of these are fatal to the operation that raised them. Nothing in the
project retries a load or substitutes a default state after one of them.
"""

from __future__ import annotations


class StreamError(Exception):
    """Base class for engine / checkpoint failures."""


class CorruptState(StreamError, ValueError):
    """Bytes or values that do not describe a valid engine state."""


class CheckpointNotFound(StreamError, FileNotFoundError):
    """No checkpoint stored under the requested identity."""


class CheckpointIOError(StreamError, OSError):
    """Storage read/write failure (permissions, disk full, bad path)."""


class ReproducibilityError(AssertionError):
    """A restored stream did not replay the recorded draws.

    This is an engine defect, not a runtime condition to recover from.
    """
