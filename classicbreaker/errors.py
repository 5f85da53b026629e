#!/usr/bin/env python3
# errors.py (exception types raised by the analysis core)
from __future__ import annotations


class BreakerError(Exception):
    """Base class for everything the core raises on purpose."""


class SourceReadError(BreakerError):
    """Reading a text source failed while building a profile or streaming a transform."""


class InvariantViolation(BreakerError, RuntimeError):
    """Internal consistency check failed (e.g. a detected repeat that never repeats)."""


class InvalidKeyword(BreakerError, ValueError):
    pass


class SinkWriteError(BreakerError):
    """An output file could not be opened or written."""
