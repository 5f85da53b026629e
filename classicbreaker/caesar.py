#!/usr/bin/env python3
# caesar.py (shift cipher + frequency-deviation attack)
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

from .events import Observer, ShiftScored, ShiftsRanked, emit
from .utils import ALPHABET_SIZE, ORD_A, LetterProfile, fold


class Mode(Enum):
    ENCRYPT = 1
    DECRYPT = -1


@dataclass(frozen=True)
class DeviationScore:
    shift: int
    deviation: float


@dataclass(frozen=True)
class CaesarAnalysis:
    best_shift: int
    ranked: Tuple[DeviationScore, ...]


def shift_char(ch: str, shift: int) -> str:
    """Rotate a letter by ``shift`` positions; non-letters pass through. Output is lowercase."""
    ch = fold(ch)
    if not 'a' <= ch <= 'z':
        return ch
    return chr(ORD_A + (ord(ch) - ORD_A + shift) % ALPHABET_SIZE)


def encrypt_char(ch: str, shift: int) -> str:
    return shift_char(ch, shift)


def decrypt_char(ch: str, shift: int) -> str:
    return shift_char(ch, -shift)


def transform(chars: Iterable[str], shift: int, mode: Mode = Mode.ENCRYPT) -> Iterator[str]:
    s = mode.value * shift
    for ch in chars:
        yield shift_char(ch, s)


def encrypt(text: str, shift: int) -> str:
    return ''.join(transform(text, shift, Mode.ENCRYPT))


def decrypt(text: str, shift: int) -> str:
    return ''.join(transform(text, shift, Mode.DECRYPT))


def deviation(reference: LetterProfile, cipher: LetterProfile, shift: int) -> float:
    ref = reference.frequencies()
    enc = cipher.frequencies()
    return sum(abs(ref[l] - enc[(l + shift) % ALPHABET_SIZE]) for l in range(ALPHABET_SIZE))


def crypt_analyse(reference: LetterProfile, cipher: LetterProfile,
                  observer: Optional[Observer] = None) -> CaesarAnalysis:
    """
    Score every shift by how far the cipher's letter distribution, rotated back
    by that shift, deviates from ``reference`` (sum of absolute percentage
    differences). Lowest deviation wins; equal deviations go to the smaller shift.
    """
    ref = reference.frequencies()
    enc = cipher.frequencies()
    scores: List[DeviationScore] = []
    for s in range(ALPHABET_SIZE):
        dev = 0.0
        for l in range(ALPHABET_SIZE):
            dev += abs(ref[l] - enc[(l + s) % ALPHABET_SIZE])
        scores.append(DeviationScore(shift=s, deviation=dev))
        emit(observer, ShiftScored(shift=s, deviation=dev))

    ranked = tuple(sorted(scores, key=lambda d: (d.deviation, d.shift)))
    emit(observer, ShiftsRanked(ranked=ranked))
    return CaesarAnalysis(best_shift=ranked[0].shift, ranked=ranked)
