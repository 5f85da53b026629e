#!/usr/bin/env python3
# utils.py (26-letter frequency model + text source helpers)
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, TextIO, Tuple, Union
from pathlib import Path
import json, re

from .errors import SourceReadError

ALPHABET_SIZE = 26
ORD_A, ORD_Z = ord('a'), ord('z')
ALPH = ''.join(chr(ORD_A + i) for i in range(ALPHABET_SIZE))

CHUNK_SIZE = 64 * 1024
MONOGRAM_SCALE = 100_000

# Letter counts per 100 000 letters of general English prose.
ENGLISH_MONOGRAMS: Dict[str, int] = {
    "A": 8167, "B": 1492, "C": 2782, "D": 4253, "E": 12702, "F": 2228,
    "G": 2015, "H": 6094, "I": 6966, "J": 153, "K": 772, "L": 4025,
    "M": 2406, "N": 6749, "O": 7507, "P": 1929, "Q": 95, "R": 5987,
    "S": 6327, "T": 9056, "U": 2758, "V": 978, "W": 2360, "X": 150,
    "Y": 1974, "Z": 74,
}

Letter = Union[int, str]


def _letter_index(letter: Letter) -> int:
    if isinstance(letter, str):
        o = ord(fold(letter)) if len(letter) == 1 else -1
        if not ORD_A <= o <= ORD_Z:
            raise ValueError(f"not a letter: {letter!r}")
        return o - ORD_A
    if not 0 <= letter < ALPHABET_SIZE:
        raise ValueError(f"letter index out of range: {letter}")
    return letter


def fold(ch: str) -> str:
    """ASCII-only case fold; anything outside A..Z comes back untouched."""
    return chr(ord(ch) + 32) if 'A' <= ch <= 'Z' else ch


def percentage(amount: float, total: float) -> float:
    return 100.0 * amount / total if total else 0.0


def clean_lower_letters(text: str) -> str:
    """Lowercase and keep only a..z."""
    return ''.join(ch for ch in map(fold, text) if 'a' <= ch <= 'z')


def counts26(text: str) -> Tuple[List[int], int]:
    c = [0]*ALPHABET_SIZE
    n = 0
    for ch in text:
        o = ord(fold(ch))
        if ORD_A <= o <= ORD_Z:
            c[o - ORD_A] += 1
            n += 1
    return c, n


# -------------------------------
# Text sources / sinks
# -------------------------------
def iter_chars(source: TextIO, chunk_size: int = CHUNK_SIZE) -> Iterator[str]:
    """Lazily yield the characters of a readable text stream."""
    while True:
        try:
            chunk = source.read(chunk_size)
        except OSError as e:
            raise SourceReadError(f"failed reading text source: {e}") from e
        if not chunk:
            return
        yield from chunk


def write_chars(chars: Iterable[str], sink: TextIO, chunk_size: int = CHUNK_SIZE) -> int:
    """Write a character sequence to a writable; returns the number of characters written."""
    buf: List[str] = []
    written = 0
    for ch in chars:
        buf.append(ch)
        if len(buf) >= chunk_size:
            sink.write(''.join(buf))
            written += len(buf)
            buf = []
    if buf:
        sink.write(''.join(buf))
        written += len(buf)
    return written


class CiphertextParser:
    """
    Extract ciphertext blocks surrounded by triple quotes. Text without any
    such block is taken whole.
    """
    QUOTE_RX = re.compile(r'"""(.*?)"""', re.DOTALL)

    @staticmethod
    def parse_string(data: str) -> List[str]:
        blocks = CiphertextParser.QUOTE_RX.findall(data or "")
        if not blocks:
            return [data.strip()] if data and data.strip() else []
        return [blk.strip() for blk in blocks if blk.strip()]

    @staticmethod
    def parse_file(filename: Union[Path, str]) -> List[str]:
        try:
            data = Path(filename).read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            raise SourceReadError(f"cannot read {filename}: {e}") from e
        return CiphertextParser.parse_string(data)

    @staticmethod
    def format_blocks(blocks: Iterable[str]) -> str:
        return ''.join(f'"""\n{blk}\n"""\n\n' for blk in blocks)


# -------------------------------
# Frequency model
# -------------------------------
@dataclass(frozen=True)
class LetterProfile:
    """
    Per-letter occurrence counts over a..z.

    ``total`` is the denominator for frequencies. Built from a string it is the
    raw string length (non-letters included); built from a stream or a
    histogram it is the number of letters counted.
    """
    counts: Tuple[int, ...]
    total: int
    text: Optional[str] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if len(self.counts) != ALPHABET_SIZE:
            raise ValueError(f"expected {ALPHABET_SIZE} counts, got {len(self.counts)}")
        if any(c < 0 for c in self.counts):
            raise ValueError("letter counts must be non-negative")
        if self.total < sum(self.counts):
            raise ValueError("total must be at least the number of letters counted")

    @classmethod
    def from_text(cls, text: str) -> "LetterProfile":
        counts, _ = counts26(text)
        return cls(counts=tuple(counts), total=len(text))

    @classmethod
    def from_stream(cls, source: TextIO, keep_text: bool = False) -> "LetterProfile":
        counts = [0]*ALPHABET_SIZE
        kept: List[str] = []
        for ch in iter_chars(source):
            ch = fold(ch)
            o = ord(ch)
            if not ORD_A <= o <= ORD_Z:
                continue
            counts[o - ORD_A] += 1
            if keep_text:
                kept.append(ch)
        return cls(counts=tuple(counts), total=sum(counts),
                   text=''.join(kept) if keep_text else None)

    @classmethod
    def from_counts(cls, counts: Union[Mapping[str, float], Sequence[int]]) -> "LetterProfile":
        """
        Profile from a pre-supplied histogram. Integer weights are taken as
        counts; fractional weights (probabilities, percentages) are rescaled to
        counts per ``MONOGRAM_SCALE`` letters.
        """
        if isinstance(counts, Mapping):
            weights = [0.0]*ALPHABET_SIZE
            for k, v in counts.items():
                if len(k) == 1 and 'a' <= fold(k) <= 'z':
                    weights[_letter_index(k)] += float(v)
            if all(w.is_integer() for w in weights):
                vec = [int(w) for w in weights]
            else:
                s = sum(weights)
                if s <= 0:
                    raise ValueError("monogram weights must sum to a positive number")
                vec = [int(round(w * MONOGRAM_SCALE / s)) for w in weights]
        else:
            vec = [int(v) for v in counts]
        return cls(counts=tuple(vec), total=sum(vec))

    def count(self, letter: Letter) -> int:
        return self.counts[_letter_index(letter)]

    @property
    def letters(self) -> int:
        return sum(self.counts)

    def frequency(self, letter: Letter) -> float:
        """Percentage of ``total`` taken by ``letter``; 0 for an empty profile."""
        return percentage(self.counts[_letter_index(letter)], self.total)

    def frequencies(self) -> List[float]:
        return [percentage(c, self.total) for c in self.counts]

    @property
    def index_of_coincidence(self) -> float:
        # sum of squared frequencies, no n(n-1) correction
        return sum((f / 100.0) ** 2 for f in self.frequencies())

    def letters_by_frequency(self) -> List[Tuple[str, int]]:
        pairs = [(ALPH[i], c) for i, c in enumerate(self.counts)]
        return sorted(pairs, key=lambda p: -p[1])


def build_profile(source: Union[str, TextIO], keep_text: bool = False) -> LetterProfile:
    if isinstance(source, str):
        return LetterProfile.from_text(source)
    return LetterProfile.from_stream(source, keep_text=keep_text)


def english_profile() -> LetterProfile:
    return LetterProfile.from_counts(ENGLISH_MONOGRAMS)


# -------------------------------
# Reference data
# -------------------------------
def load_language_data(path: Union[Path, str] = "language_data.json") -> LetterProfile:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise SourceReadError(f"cannot read language data {p}: {e}") from e
    profile = LetterProfile.from_counts(data["english_monograms"])
    if profile.total == 0:
        raise ValueError(f"language data {p} has no letter counts")
    return profile


def load_reference_profile(path: Union[Path, str]) -> LetterProfile:
    p = Path(path)
    if p.suffix.lower() == ".json":
        return load_language_data(p)
    try:
        with p.open("r", encoding="utf-8", errors="ignore") as f:
            return LetterProfile.from_stream(f, keep_text=True)
    except OSError as e:
        raise SourceReadError(f"cannot read reference text {p}: {e}") from e
