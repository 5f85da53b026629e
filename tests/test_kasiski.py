import pytest

from classicbreaker import kasiski
from classicbreaker.errors import InvariantViolation
from classicbreaker.events import FactorsRanked, RepeatFound
from classicbreaker.kasiski import FactorTally
from classicbreaker.report import EventLog
from classicbreaker.utils import ALPH


def test_find_repeats_takes_longest_repeat_at_each_position():
    assert kasiski.find_repeats("abcdxabcd") == {"abcd": 0}


def test_find_repeats_resumes_after_each_match():
    # "ab" and "cd" each repeat once; nothing else does
    assert kasiski.find_repeats("abqrstabcdwxcd") == {"ab": 0, "cd": 8}


def test_find_repeats_keeps_first_offset():
    # "abcdeabcde" matches again at 10 but keeps offset 0
    assert kasiski.find_repeats("abcde" * 6) == {"abcdeabcde": 0, "abcde": 20}


def test_find_repeats_ignores_whitespace_runs():
    assert kasiski.find_repeats("ab cd ab") == {"ab": 0}
    assert kasiski.find_repeats("abcdefgh") == {}


def test_compute_distances():
    text = "abqrstabcdwxcd"
    repeats = kasiski.find_repeats(text)
    assert kasiski.compute_distances(text, repeats) == {"ab": 6, "cd": 4}


def test_compute_distances_rejects_a_repeat_that_never_repeats():
    with pytest.raises(InvariantViolation):
        kasiski.compute_distances("abcdef", {"ab": 0})


def test_factorize_counts_every_divisor_in_range():
    tally = kasiski.factorize({"ab": 6, "cd": 4})
    assert tally.counts == {2: 2, 3: 1, 4: 1, 5: 0, 6: 1, 7: 0, 8: 0, 9: 0, 10: 0}
    assert tally[11] == 0


def test_rank_factors_breaks_ties_towards_larger_divisor():
    ranked = kasiski.rank_factors(kasiski.factorize({"ab": 6, "cd": 4}), 2)
    assert [r.divisor for r in ranked] == [2, 6, 4, 3, 10, 9, 8, 7, 5]
    assert ranked[0].percentage == pytest.approx(100.0)
    assert ranked[1].percentage == pytest.approx(50.0)


def test_find_key_length():
    tally = kasiski.factorize({"ab": 6, "cd": 4})
    assert kasiski.find_key_length(tally, 2) == 2
    assert kasiski.find_key_length(FactorTally({2: 3, 3: 3, 4: 1}), 3) == 3


def test_find_key_lengths_uses_tolerance():
    tally = kasiski.factorize({"ab": 6, "cd": 4})
    assert kasiski.find_key_lengths(tally, 2) == (2,)
    assert kasiski.find_key_lengths(tally, 2, tolerance=60.0) == (2, 6, 4, 3)


def test_find_key_lengths_without_repeats_is_empty():
    tally = kasiski.factorize({})
    assert kasiski.find_key_lengths(tally, 0) == ()
    # every count ties at zero, so the largest divisor comes first
    assert kasiski.find_key_length(tally, 0) == kasiski.MAX_FACTOR


def test_kasiski_test_on_periodic_text():
    assert kasiski.kasiski_test("abcdeabcde") == 5
    assert kasiski.kasiski_candidates("abcdeabcde") == (5,)


@pytest.mark.parametrize("period", [7, 9])
def test_kasiski_finds_period_of_repeating_structure(period):
    text = ALPH[:period] * 8
    assert kasiski.kasiski_test(text) == period
    assert period in kasiski.kasiski_candidates(text)


def test_observer_receives_repeats_and_ranking():
    log = EventLog()
    kasiski.kasiski_test("abqrstabcdwxcd", observer=log)
    found = [e for e in log if isinstance(e, RepeatFound)]
    assert [(e.word, e.offset) for e in found] == [("ab", 0), ("cd", 8)]
    assert found[-1].progress == pytest.approx(100 * 10 / 14)
    assert isinstance(log[-1], FactorsRanked)
