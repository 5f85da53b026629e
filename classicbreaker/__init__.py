"""Classical Caesar / Vigenère ciphers and their statistical cryptanalysis."""
from .caesar import CaesarAnalysis, DeviationScore, Mode
from .errors import BreakerError, InvalidKeyword, InvariantViolation, SinkWriteError, SourceReadError
from .friedman import friedman_test
from .kasiski import kasiski_candidates, kasiski_test
from .utils import LetterProfile, build_profile, english_profile

__version__ = "0.1.0"
