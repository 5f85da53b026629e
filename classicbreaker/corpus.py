#!/usr/bin/env python3
# corpus.py (Gutenberg reference texts via nltk + sample ciphertext generator)
from __future__ import annotations
from typing import List, Optional, Tuple
import io, random, re

import nltk
from nltk.corpus import gutenberg

from . import vigenere
from .errors import SourceReadError
from .utils import ALPH, LetterProfile, english_profile, load_reference_profile

NLTK_PREFIX = "nltk:"
DEFAULT_FILEID = "austen-emma.txt"

FALLBACK_WORDS = ("the of and to in a is that be it for on as with by this you not "
                  "are or have from at which one had were all we can her has there").split()


def _try_download(pkg: str):
    try:
        nltk.data.find(f'corpora/{pkg}')
    except LookupError:
        nltk.download(pkg, quiet=True)


def load_gutenberg_text(fileid: str = DEFAULT_FILEID) -> str:
    _try_download("gutenberg")
    try:
        return gutenberg.raw(fileid)
    except (LookupError, OSError, ValueError) as e:
        raise SourceReadError(f"gutenberg text {fileid!r} unavailable: {e}") from e


def resolve_reference(source: Optional[str]) -> LetterProfile:
    """
    Reference profile from ``source``:
      None              built-in English letter counts
      nltk:<fileid>     a Gutenberg text from the nltk corpus
      anything else     a path (JSON monogram table or plain text)
    """
    if not source:
        return english_profile()
    if source.startswith(NLTK_PREFIX):
        fileid = source[len(NLTK_PREFIX):] or DEFAULT_FILEID
        return LetterProfile.from_stream(io.StringIO(load_gutenberg_text(fileid)), keep_text=True)
    return load_reference_profile(source)


def _corpus_words() -> List[str]:
    try:
        _try_download("gutenberg")
        words = [w.lower() for w in gutenberg.words() if w.isalpha()]
    except (LookupError, OSError):
        words = []
    return words if len(words) > 10000 else list(FALLBACK_WORDS)


def random_key(length: int, rng: random.Random) -> str:
    return ''.join(rng.choice(ALPH) for _ in range(length))


def generate_cipher_blocks(
    num_chunks: int = 5,
    words_per_chunk: int = 200,
    keylen_min: int = 2,
    keylen_max: int = 10,
    seed: Optional[int] = None,
) -> Tuple[List[str], List[str], List[str]]:
    """Encrypt random runs of Gutenberg words with random keys; returns (ciphers, keys, plains)."""
    rng = random.Random(seed)
    words = _corpus_words()

    plains, keys, ciphers = [], [], []
    for _ in range(num_chunks):
        chunk_words = []
        while len(chunk_words) < words_per_chunk:
            w = re.sub(r'[^a-z]', '', rng.choice(words))
            if w:
                chunk_words.append(w)
        plain = ' '.join(chunk_words)
        key = random_key(rng.randint(keylen_min, keylen_max), rng)
        plains.append(plain); keys.append(key); ciphers.append(vigenere.encrypt(plain, key))
    return ciphers, keys, plains
