#!/usr/bin/env python3
# report.py (console rendering of analysis events and tables)
from __future__ import annotations
from typing import Callable, Optional, TextIO
import sys

from .events import (
    ColumnSolved, DistanceComputed, Event, FactorsRanked, KeyLengthScored, KeyRecovered,
    RepeatFound, RepeatSearchStarted, ShiftScored, ShiftsRanked,
)
from .utils import ALPH, LetterProfile, percentage


class Term:
    RED = '\033[91m'; GREEN = '\033[92m'; YELLOW = '\033[93m'
    BLUE = '\033[94m'; MAGENTA = '\033[95m'; CYAN = '\033[96m'
    BOLD = '\033[1m'; END = '\033[0m'


def frequency_table(profile: LetterProfile, by_frequency: bool = False) -> str:
    if profile.total == 0:
        return "Couldn't analyse. No letters were counted."
    title = "Freq Analysis: Sorted by %" if by_frequency else "Freq Analysis: Alphabetical"
    rows = profile.letters_by_frequency() if by_frequency else list(zip(ALPH, profile.counts))
    lines = [title, "-" * 27, "Letter | Count | Frequency"]
    for letter, count in rows:
        lines.append(f"{letter:>6} | {count:5d} | {percentage(count, profile.total):5.2f} %")
    return '\n'.join(lines)


class ConsoleReporter:
    """
    Observer that prints analysis progress. ``verbose`` adds the per-item chatter
    (every scored shift, repeat and distance); summaries are always shown.
    """
    def __init__(self, verbose: bool = False, out: Optional[TextIO] = None, color: bool = True):
        self.verbose = verbose
        self.out = out
        self.color = color

    def _print(self, msg: str, color: str = ""):
        if self.color and color:
            msg = f"{color}{msg}{Term.END}"
        print(msg, file=self.out or sys.stdout)

    def __call__(self, event: Event) -> None:
        handler: Optional[Callable[[Event], None]] = getattr(self, f"_on_{type(event).__name__}", None)
        if handler is not None:
            handler(event)

    def _on_ShiftScored(self, e: ShiftScored):
        if self.verbose:
            self._print(f"Shifting the cipher by {e.shift:2d} deviates it from the norm by {e.deviation:6.2f} %")

    def _on_ShiftsRanked(self, e: ShiftsRanked):
        if not self.verbose:
            return
        self._print("Shifts sorted by deviation:", Term.CYAN)
        for d in e.ranked:
            self._print(f"Shift: {d.shift:2d} | Deviation: {d.deviation:4.2f} %")

    def _on_RepeatSearchStarted(self, e: RepeatSearchStarted):
        self._print(f"Finding repeating words of length [{e.min_len},{e.max_len}] please wait...", Term.CYAN)

    def _on_RepeatFound(self, e: RepeatFound):
        if self.verbose:
            self._print(f"Loading: {e.progress:5.2f} % | Word #{e.number}: {e.word}")

    def _on_DistanceComputed(self, e: DistanceComputed):
        if self.verbose:
            self._print(f"Distance: {e.distance:4d} | #{e.number} Word: {e.word}")

    def _on_FactorsRanked(self, e: FactorsRanked):
        self._print("Factors sorted by number of distances they divide:", Term.CYAN)
        for r in e.ranked:
            self._print(f"Num of words factorizable by {r.divisor:2d} : {r.count} ({r.percentage:.2f} %)")

    def _on_KeyLengthScored(self, e: KeyLengthScored):
        self._print(f"Key length: {e.key_length:2d} | Avg Index of Coincidence: {e.average_ioc:f}")

    def _on_ColumnSolved(self, e: ColumnSolved):
        if self.verbose:
            self._print(f"  column {e.column:02d}: shift {e.shift:2d} -> '{e.letter}'", Term.YELLOW)

    def _on_KeyRecovered(self, e: KeyRecovered):
        self._print("Shift values used: " + ' '.join(str(s) for s in e.shifts))
        self._print(f"[+] Key: {e.key}", Term.GREEN)


class EventLog(list):
    """Observer that just records events, for callers that post-process them."""
    def __call__(self, event: Event) -> None:
        self.append(event)
