#!/usr/bin/env python3
# friedman.py (average index of coincidence per candidate key length)
from __future__ import annotations
from typing import List, Optional, Sequence
import concurrent.futures

from .events import KeyLengthScored, Observer, emit
from .utils import LetterProfile
from .vigenere import break_down_cipher

# Adjust these to estimate longer key lengths
MIN_KEY_LENGTH = 2
MAX_KEY_LENGTH = 10


def average_ioc(text: str, key_length: int) -> float:
    streams = break_down_cipher(text, key_length)
    return sum(LetterProfile.from_text(s).index_of_coincidence for s in streams) / key_length


def find_closest(values: Sequence[float], target: float) -> int:
    """Index of the value nearest to ``target``; the first one wins a tie."""
    idx = 0
    best = abs(values[0] - target)
    for i in range(1, len(values)):
        diff = abs(values[i] - target)
        if diff < best:
            idx, best = i, diff
    return idx


def friedman_test(text: str, reference_ioc: float,
                  min_len: int = MIN_KEY_LENGTH, max_len: int = MAX_KEY_LENGTH,
                  observer: Optional[Observer] = None, max_workers: int = 1) -> int:
    """
    Key length whose columns look most like the reference language.

    For every length in ``min_len..max_len`` the text is split into interleaved
    columns and their index of coincidence averaged; the length whose average is
    closest to ``reference_ioc`` is returned. ``text`` should be letters only and
    non-empty: an empty text scores 0 everywhere and yields ``min_len``.
    """
    lengths = list(range(min_len, max_len + 1))
    if max_workers > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as ex:
            averages: List[float] = list(ex.map(lambda n: average_ioc(text, n), lengths))
    else:
        averages = [average_ioc(text, n) for n in lengths]

    for n, avg in zip(lengths, averages):
        emit(observer, KeyLengthScored(key_length=n, average_ioc=avg))
    return lengths[find_closest(averages, reference_ioc)]
