#!/usr/bin/env python3
# vigenere.py (repeating-keyword cipher + per-column Caesar attack)
from __future__ import annotations
from functools import reduce
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple
import concurrent.futures

from . import caesar
from .caesar import CaesarAnalysis, Mode
from .errors import InvalidKeyword
from .events import ColumnSolved, KeyRecovered, Observer, emit
from .utils import ALPHABET_SIZE, ORD_A, LetterProfile, fold


def normalize_keyword(key: str) -> str:
    """Lowercase ``key``; it must be non-empty and made of a..z only."""
    if not key:
        raise InvalidKeyword("keyword must not be empty")
    key = ''.join(map(fold, key))
    bad = sorted({ch for ch in key if not 'a' <= ch <= 'z'})
    if bad:
        raise InvalidKeyword(f"keyword may only contain letters a-z, got {''.join(bad)!r}")
    return key


def key_shifts(key: str) -> Tuple[int, ...]:
    return tuple(ord(ch) - ORD_A for ch in normalize_keyword(key))


def transform(chars: Iterable[str], key: str, mode: Mode = Mode.ENCRYPT) -> Iterator[str]:
    """
    Shift each letter by the key letter at its position among the letters seen
    so far. Non-letters pass through and do not advance the key.

    The keyword is checked here, before any character is consumed.
    """
    shifts = [mode.value * s for s in key_shifts(key)]
    return _shift_letters(chars, shifts)


def _shift_letters(chars: Iterable[str], shifts: Sequence[int]) -> Iterator[str]:
    m = len(shifts)
    i = 0
    for ch in chars:
        ch = fold(ch)
        if not 'a' <= ch <= 'z':
            yield ch
            continue
        yield caesar.shift_char(ch, shifts[i % m])
        i += 1


def encrypt(text: str, key: str) -> str:
    return ''.join(transform(text, key, Mode.ENCRYPT))


def decrypt(text: str, key: str) -> str:
    return ''.join(transform(text, key, Mode.DECRYPT))


def break_down_cipher(text: str, key_length: int) -> List[str]:
    """
    Split ``text`` into ``key_length`` interleaved columns by raw position.

    Unlike ``transform`` every character counts here, letters or not, so the
    columns only line up with the key when ``text`` is letters only.
    """
    if key_length < 1:
        raise ValueError(f"key length must be positive, got {key_length}")
    return [text[r::key_length] for r in range(key_length)]


def shift_letter(shift: int) -> str:
    return chr(ORD_A + shift % ALPHABET_SIZE)


def analyse_columns(reference: LetterProfile, columns: Sequence[str],
                    max_workers: int = 1) -> List[CaesarAnalysis]:
    profiles = [LetterProfile.from_text(c) for c in columns]
    if max_workers > 1 and len(profiles) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as ex:
            return list(ex.map(lambda p: caesar.crypt_analyse(reference, p), profiles))
    return [caesar.crypt_analyse(reference, p) for p in profiles]


def crypt_analyse(reference: LetterProfile, columns: Sequence[str],
                  observer: Optional[Observer] = None, max_workers: int = 1) -> str:
    """Recover the keyword: one Caesar attack per column, shifts read back as letters."""
    results = analyse_columns(reference, columns, max_workers=max_workers)
    shifts = tuple(r.best_shift for r in results)
    for i, s in enumerate(shifts):
        emit(observer, ColumnSolved(column=i, shift=s, letter=shift_letter(s)))
    key = reduce(lambda acc, s: acc + shift_letter(s), shifts, '')
    emit(observer, KeyRecovered(key=key, shifts=shifts))
    return key
