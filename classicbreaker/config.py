#!/usr/bin/env python3
# config.py (analysis settings, environment overrides, thread budget)
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Mapping, Optional
import os

from . import friedman, kasiski


def _available_cpus() -> int:
    try:
        return len(os.sched_getaffinity(0))
    except (AttributeError, OSError):
        return max(1, os.cpu_count() or 1)


def thread_budget(cap: int) -> int:
    return max(1, min(_available_cpus(), cap))


def _int(s: Optional[str], default: int) -> int:
    try:
        return int(s) if s is not None and s != "" else default
    except ValueError:
        return default


def _float(s: Optional[str], default: float) -> float:
    try:
        return float(s) if s is not None and s != "" else default
    except ValueError:
        return default


@dataclass(frozen=True)
class BreakerConfig:
    min_factor: int = kasiski.MIN_FACTOR
    max_factor: int = kasiski.MAX_FACTOR
    tolerance: float = kasiski.KEY_TOLERANCE
    min_key_length: int = friedman.MIN_KEY_LENGTH
    max_key_length: int = friedman.MAX_KEY_LENGTH
    threads_max: int = 2
    reference_path: Optional[str] = None

    def __post_init__(self):
        if not 1 <= self.min_factor <= self.max_factor:
            raise ValueError(f"bad factor range {self.min_factor}..{self.max_factor}")
        if not 1 <= self.min_key_length <= self.max_key_length:
            raise ValueError(f"bad key length range {self.min_key_length}..{self.max_key_length}")
        if self.tolerance < 0:
            raise ValueError("tolerance must be non-negative")

    @property
    def workers(self) -> int:
        return thread_budget(self.threads_max)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BreakerConfig":
        env = os.environ if environ is None else environ
        return cls(
            tolerance=_float(env.get("KASISKI_TOLERANCE"), kasiski.KEY_TOLERANCE),
            threads_max=_int(env.get("BREAKER_THREADS_MAX"), 2),
            reference_path=env.get("REFERENCE_PATH") or None,
        )

    def with_overrides(self, **changes) -> "BreakerConfig":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
