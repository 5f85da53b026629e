from pathlib import Path

import pytest

from classicbreaker.utils import LetterProfile, clean_lower_letters, english_profile

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(scope="session")
def sample_path():
    return DATA_DIR / "sample.txt"


@pytest.fixture(scope="session")
def sample_text(sample_path):
    """A few pages of public-domain English prose (about 4900 letters)."""
    return sample_path.read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def sample_letters(sample_text):
    return clean_lower_letters(sample_text)


@pytest.fixture(scope="session")
def sample_profile(sample_letters):
    return LetterProfile.from_text(sample_letters)


@pytest.fixture(scope="session")
def english():
    return english_profile()
