#!/usr/bin/env python3
# events.py (immutable progress events handed to an optional observer)
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Tuple, Union

if TYPE_CHECKING:
    from .caesar import DeviationScore
    from .kasiski import FactorRank


@dataclass(frozen=True)
class ShiftScored:
    shift: int
    deviation: float


@dataclass(frozen=True)
class ShiftsRanked:
    ranked: Tuple["DeviationScore", ...]


@dataclass(frozen=True)
class RepeatSearchStarted:
    min_len: int
    max_len: int


@dataclass(frozen=True)
class RepeatFound:
    number: int
    word: str
    offset: int
    progress: float     # percent of the text scanned


@dataclass(frozen=True)
class DistanceComputed:
    number: int
    word: str
    distance: int


@dataclass(frozen=True)
class FactorsRanked:
    ranked: Tuple["FactorRank", ...]


@dataclass(frozen=True)
class KeyLengthScored:
    key_length: int
    average_ioc: float


@dataclass(frozen=True)
class ColumnSolved:
    column: int
    shift: int
    letter: str


@dataclass(frozen=True)
class KeyRecovered:
    key: str
    shifts: Tuple[int, ...]


Event = Union[ShiftScored, ShiftsRanked, RepeatSearchStarted, RepeatFound, DistanceComputed,
              FactorsRanked, KeyLengthScored, ColumnSolved, KeyRecovered]
Observer = Callable[[Event], None]


def emit(observer: Optional[Observer], event: Event) -> None:
    if observer is not None:
        observer(event)
