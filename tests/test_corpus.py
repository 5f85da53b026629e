import random

import pytest

from classicbreaker import corpus, vigenere
from classicbreaker.errors import SourceReadError
from classicbreaker.utils import english_profile


def test_resolve_default_is_english():
    assert corpus.resolve_reference(None) == english_profile()


def test_resolve_nltk_text(monkeypatch):
    seen = []

    def fake(fileid):
        seen.append(fileid)
        return "Emma Woodhouse, handsome!"

    monkeypatch.setattr(corpus, "load_gutenberg_text", fake)
    prof = corpus.resolve_reference("nltk:")
    assert seen == [corpus.DEFAULT_FILEID]
    assert prof.letters == len("EmmaWoodhousehandsome")
    assert prof.count("m") == 3

    corpus.resolve_reference("nltk:melville-moby_dick.txt")
    assert seen[-1] == "melville-moby_dick.txt"


def test_resolve_path(sample_path, sample_profile):
    prof = corpus.resolve_reference(str(sample_path))
    assert prof.counts == sample_profile.counts


def test_resolve_missing_path(tmp_path):
    with pytest.raises(SourceReadError):
        corpus.resolve_reference(str(tmp_path / "nope.txt"))


def test_random_key():
    key = corpus.random_key(7, random.Random(1))
    assert len(key) == 7
    assert key.isalpha() and key.islower()


def test_generate_cipher_blocks(monkeypatch):
    monkeypatch.setattr(corpus, "_corpus_words", lambda: ["river", "stone", "x-ray"])
    ciphers, keys, plains = corpus.generate_cipher_blocks(
        num_chunks=4, words_per_chunk=12, keylen_min=3, keylen_max=5, seed=42)
    assert len(ciphers) == len(keys) == len(plains) == 4
    for c, k, p in zip(ciphers, keys, plains):
        assert 3 <= len(k) <= 5
        assert len(p.split()) == 12
        assert set(p.split()) <= {"river", "stone", "xray"}
        assert vigenere.decrypt(c, k) == p


def test_generate_is_seeded(monkeypatch):
    monkeypatch.setattr(corpus, "_corpus_words", lambda: ["alpha", "beta", "gamma"])
    assert corpus.generate_cipher_blocks(2, 5, seed=7) == corpus.generate_cipher_blocks(2, 5, seed=7)
