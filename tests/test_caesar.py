import pytest

from classicbreaker import caesar
from classicbreaker.caesar import Mode
from classicbreaker.events import ShiftScored, ShiftsRanked
from classicbreaker.report import EventLog
from classicbreaker.utils import LetterProfile, clean_lower_letters


@pytest.mark.parametrize("ch,shift,expected", [
    ("a", 3, "d"),
    ("x", 3, "a"),
    ("Z", 1, "a"),
    ("A", 0, "a"),
    ("m", 26, "m"),
    (" ", 5, " "),
    ("7", 5, "7"),
    ("é", 5, "é"),
])
def test_encrypt_char(ch, shift, expected):
    assert caesar.encrypt_char(ch, shift) == expected


def test_decrypt_char_wraps_below_a():
    assert caesar.decrypt_char("b", 3) == "y"
    assert caesar.decrypt_char("B", 3) == "y"


def test_transform_is_lazy_and_restartable():
    source = "Hello, World"
    stream = caesar.transform(source, 3, Mode.ENCRYPT)
    assert next(stream) == "k"
    assert ''.join(caesar.transform(source, 3, Mode.ENCRYPT)) == "khoor, zruog"
    assert ''.join(caesar.transform("khoor, zruog", 3, Mode.DECRYPT)) == "hello, world"


@pytest.mark.parametrize("shift", range(26))
def test_round_trip_flattens_case(shift):
    text = "The Quick Brown Fox -- jumps over 13 lazy dogs!"
    assert caesar.decrypt(caesar.encrypt(text, shift), shift) == text.lower()


def test_recovers_shift_against_own_sample(sample_letters, sample_profile):
    cipher = LetterProfile.from_text(clean_lower_letters(caesar.encrypt(sample_letters, 7)))
    analysis = caesar.crypt_analyse(sample_profile, cipher)
    assert analysis.best_shift == 7
    assert analysis.ranked[0].deviation == pytest.approx(0.0)


def test_recovers_shift_against_english(english, sample_letters):
    cipher = LetterProfile.from_text(caesar.encrypt(sample_letters, 19))
    assert caesar.crypt_analyse(english, cipher).best_shift == 19


def test_ranked_is_sorted_by_deviation_then_shift(english, sample_letters):
    ranked = caesar.crypt_analyse(english, LetterProfile.from_text(sample_letters)).ranked
    assert sorted(d.shift for d in ranked) == list(range(26))
    keys = [(d.deviation, d.shift) for d in ranked]
    assert keys == sorted(keys)


def test_empty_cipher_degenerates_to_shift_zero(english):
    analysis = caesar.crypt_analyse(english, LetterProfile.from_text(""))
    assert analysis.best_shift == 0
    assert [d.shift for d in analysis.ranked] == list(range(26))
    assert analysis.ranked[0].deviation == pytest.approx(100.0)


def test_observer_sees_every_shift(english, sample_letters):
    log = EventLog()
    caesar.crypt_analyse(english, LetterProfile.from_text(sample_letters), observer=log)
    scored = [e for e in log if isinstance(e, ShiftScored)]
    assert [e.shift for e in scored] == list(range(26))
    assert isinstance(log[-1], ShiftsRanked)
