#!/usr/bin/env python3
# kasiski.py (repeated-substring distances -> key length)
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import re

from .errors import InvariantViolation
from .events import DistanceComputed, FactorsRanked, Observer, RepeatFound, RepeatSearchStarted, emit
from .utils import percentage

# Smallest and largest key lengths considered
MIN_FACTOR = 2
MAX_FACTOR = 10

# Percentage points below the best factor still accepted as a candidate length
KEY_TOLERANCE = 15.0


@dataclass(frozen=True)
class FactorTally:
    counts: Dict[int, int]      # divisor -> number of distances it divides

    def __getitem__(self, divisor: int) -> int:
        return self.counts.get(divisor, 0)


@dataclass(frozen=True)
class FactorRank:
    divisor: int
    count: int
    percentage: float


def _repeat_pattern(min_len: int, max_len: int) -> "re.Pattern[str]":
    return re.compile(r"(\S{%d,%d})(?=.*?\1)" % (min_len, max_len))


def find_repeats(text: str, min_len: int = MIN_FACTOR, max_len: int = MAX_FACTOR,
                 observer: Optional[Observer] = None) -> Dict[str, int]:
    """
    Substrings of ``min_len``..``max_len`` non-space characters that occur again
    later in ``text``, mapped to their first offset.

    The text is scanned left to right; at each position the longest substring
    with a later repeat is taken and scanning resumes after it. A substring that
    has already been recorded keeps its first offset.
    """
    emit(observer, RepeatSearchStarted(min_len=min_len, max_len=max_len))
    repeats: Dict[str, int] = {}
    for m in _repeat_pattern(min_len, max_len).finditer(text):
        word = m.group(1)
        if word in repeats:
            continue
        repeats[word] = m.start()
        emit(observer, RepeatFound(number=len(repeats), word=word, offset=m.start(),
                                   progress=percentage(m.end(), len(text))))
    return repeats


def compute_distances(text: str, repeats: Dict[str, int],
                      observer: Optional[Observer] = None) -> Dict[str, int]:
    """Distance from each repeat's first offset to its next occurrence past the first one's end."""
    distances: Dict[str, int] = {}
    for n, (word, offset) in enumerate(repeats.items(), 1):
        nxt = text.find(word, offset + len(word))
        if nxt < 0:
            raise InvariantViolation(f"repeat {word!r} at offset {offset} has no later occurrence")
        distances[word] = nxt - offset
        emit(observer, DistanceComputed(number=n, word=word, distance=distances[word]))
    return distances


def factorize(distances: Dict[str, int], min_factor: int = MIN_FACTOR,
              max_factor: int = MAX_FACTOR) -> FactorTally:
    counts = {d: 0 for d in range(min_factor, max_factor + 1)}
    for distance in distances.values():
        for d in counts:
            if distance % d == 0:
                counts[d] += 1
    return FactorTally(counts=counts)


def rank_factors(tally: FactorTally, total_words: int) -> Tuple[FactorRank, ...]:
    """Most frequent divisor first; equal counts favour the larger divisor."""
    ranked = sorted(tally.counts.items(), key=lambda kv: (-kv[1], -kv[0]))
    return tuple(FactorRank(divisor=d, count=c, percentage=percentage(c, total_words))
                 for d, c in ranked)


def find_key_length(tally: FactorTally, total_words: int,
                    observer: Optional[Observer] = None) -> int:
    ranked = rank_factors(tally, total_words)
    emit(observer, FactorsRanked(ranked=ranked))
    return ranked[0].divisor


def find_key_lengths(tally: FactorTally, total_words: int, tolerance: float = KEY_TOLERANCE,
                     observer: Optional[Observer] = None) -> Tuple[int, ...]:
    """Every divisor whose share of repeats lies within ``tolerance`` points of the best one."""
    ranked = rank_factors(tally, total_words)
    emit(observer, FactorsRanked(ranked=ranked))
    if total_words <= 0:
        return ()
    best = ranked[0].percentage
    return tuple(r.divisor for r in ranked if best <= r.percentage + tolerance)


def kasiski_test(text: str, min_factor: int = MIN_FACTOR, max_factor: int = MAX_FACTOR,
                 observer: Optional[Observer] = None) -> int:
    repeats = find_repeats(text, min_factor, max_factor, observer=observer)
    distances = compute_distances(text, repeats, observer=observer)
    tally = factorize(distances, min_factor, max_factor)
    return find_key_length(tally, len(repeats), observer=observer)


def kasiski_candidates(text: str, tolerance: float = KEY_TOLERANCE, min_factor: int = MIN_FACTOR,
                       max_factor: int = MAX_FACTOR, observer: Optional[Observer] = None) -> Tuple[int, ...]:
    repeats = find_repeats(text, min_factor, max_factor, observer=observer)
    distances = compute_distances(text, repeats, observer=observer)
    tally = factorize(distances, min_factor, max_factor)
    return find_key_lengths(tally, len(repeats), tolerance, observer=observer)
