#!/usr/bin/env python3
# solver.py (Caesar / Vigenère breaking pipeline + CLI)
from __future__ import annotations
import argparse, concurrent.futures, json, random, sys, time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Tuple

from . import caesar, friedman, kasiski, vigenere
from .caesar import DeviationScore, Mode
from .config import BreakerConfig
from .corpus import generate_cipher_blocks, random_key, resolve_reference
from .errors import BreakerError, SinkWriteError, SourceReadError
from .events import KeyRecovered, Observer, emit
from .report import ConsoleReporter, Term, frequency_table
from .utils import CiphertextParser, LetterProfile, clean_lower_letters, iter_chars, write_chars

METHODS = ("friedman", "kasiski", "auto")


@dataclass
class CaesarBreak:
    shift: int
    plaintext: str
    ranked: Tuple[DeviationScore, ...]


@dataclass
class BreakResult:
    key_length: int
    key: str
    plaintext: str
    score: float
    kasiski_length: Optional[int] = None
    kasiski_candidates: Tuple[int, ...] = ()
    friedman_length: Optional[int] = None


@dataclass(frozen=True)
class KeyLengthEstimates:
    kasiski_length: int
    kasiski_candidates: Tuple[int, ...]
    friedman_length: int


# ---------------------------
# Solver
# ---------------------------
class VigenereSolver:
    def __init__(self, reference: LetterProfile, config: Optional[BreakerConfig] = None,
                 observer: Optional[Observer] = None):
        self.reference = reference
        self.config = config or BreakerConfig()
        self.observer = observer

    def score(self, plaintext: str) -> float:
        """Deviation of the plaintext's letter distribution from the reference (lower is better)."""
        return caesar.deviation(self.reference, LetterProfile.from_text(clean_lower_letters(plaintext)), 0)

    def break_caesar(self, ciphertext: str) -> CaesarBreak:
        cipher = LetterProfile.from_text(clean_lower_letters(ciphertext))
        analysis = caesar.crypt_analyse(self.reference, cipher, observer=self.observer)
        return CaesarBreak(shift=analysis.best_shift,
                           plaintext=caesar.decrypt(ciphertext, analysis.best_shift),
                           ranked=analysis.ranked)

    def estimate_friedman(self, letters: str) -> int:
        cfg = self.config
        return friedman.friedman_test(letters, self.reference.index_of_coincidence,
                                      cfg.min_key_length, cfg.max_key_length,
                                      observer=self.observer, max_workers=cfg.workers)

    def estimate_key_lengths(self, letters: str) -> KeyLengthEstimates:
        cfg = self.config
        repeats = kasiski.find_repeats(letters, cfg.min_factor, cfg.max_factor, observer=self.observer)
        distances = kasiski.compute_distances(letters, repeats, observer=self.observer)
        tally = kasiski.factorize(distances, cfg.min_factor, cfg.max_factor)
        best = kasiski.find_key_length(tally, len(repeats), observer=self.observer)
        cands = kasiski.find_key_lengths(tally, len(repeats), cfg.tolerance)
        fried = self.estimate_friedman(letters)
        return KeyLengthEstimates(kasiski_length=best, kasiski_candidates=cands, friedman_length=fried)

    def try_key_length(self, letters: str, key_length: int,
                       observer: Optional[Observer] = None) -> Tuple[str, float]:
        columns = vigenere.break_down_cipher(letters, key_length)
        key = vigenere.crypt_analyse(self.reference, columns, observer=observer)
        return key, self.score(vigenere.decrypt(letters, key))

    def solve_text(self, ciphertext: str, method: str = "friedman",
                   key_length: Optional[int] = None) -> BreakResult:
        """
        Recover the keyword and decrypt ``ciphertext``. A given ``key_length``
        skips estimation; ``friedman`` skips the Kasiski scan.
        """
        if method not in METHODS:
            raise ValueError(f"unknown method {method!r}, expected one of {METHODS}")
        letters = clean_lower_letters(ciphertext)
        if not letters:
            raise BreakerError("ciphertext contains no letters to analyse")

        est: Optional[KeyLengthEstimates] = None
        fried: Optional[int] = None
        if key_length is not None:
            pool = [key_length]
        elif method == "friedman":
            fried = self.estimate_friedman(letters)
            pool = [fried]
        else:
            est = self.estimate_key_lengths(letters)
            fried = est.friedman_length
            if method == "kasiski":
                pool = [est.kasiski_length]
            else:
                pool = sorted(set(est.kasiski_candidates) | {est.kasiski_length, est.friedman_length})

        if len(pool) == 1:
            m = pool[0]
            key, score = self.try_key_length(letters, m, observer=self.observer)
        else:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.config.workers) as ex:
                scored = list(ex.map(lambda n: (n,) + self.try_key_length(letters, n), pool))
            m, key, score = min(scored, key=lambda r: (r[2], r[0]))
            emit(self.observer, KeyRecovered(key=key, shifts=vigenere.key_shifts(key)))

        return BreakResult(
            key_length=m, key=key, plaintext=vigenere.decrypt(ciphertext, key), score=score,
            kasiski_length=est.kasiski_length if est else None,
            kasiski_candidates=est.kasiski_candidates if est else (),
            friedman_length=fried,
        )


# ---------------------------
# CLI
# ---------------------------
def _open_out(path: Path) -> TextIO:
    try:
        return path.open("w", encoding="utf-8")
    except OSError as e:
        raise SinkWriteError(f"cannot write {path}: {e}") from e


def _transform_file(src: Path, out: Optional[Path], cipher: str, key: Optional[str],
                    shift: Optional[int], mode: Mode) -> int:
    try:
        fin = src.open("r", encoding="utf-8", errors="ignore")
    except OSError as e:
        raise SourceReadError(f"cannot open {src}: {e}") from e
    with fin:
        chars = iter_chars(fin)
        if cipher == "caesar":
            stream = caesar.transform(chars, shift or 0, mode)
        else:
            stream = vigenere.transform(chars, key or "", mode)
        if out is None:
            return write_chars(stream, sys.stdout)
        with _open_out(out) as fout:
            return write_chars(stream, fout)


def _print_profile(path: Path, by_frequency: bool):
    try:
        with path.open("r", encoding="utf-8", errors="ignore") as f:
            profile = LetterProfile.from_stream(f)
    except OSError as e:
        raise SourceReadError(f"cannot open {path}: {e}") from e
    print(f"Total number of letters: {profile.total}")
    print(frequency_table(profile, by_frequency=by_frequency))
    print(f"Index of coincidence: {profile.index_of_coincidence:f}")


def _solve_blocks(args, config: BreakerConfig, observer: Optional[Observer]) -> List[str]:
    reference = resolve_reference(args.reference or config.reference_path)
    solver = VigenereSolver(reference, config, observer=observer)
    blocks = CiphertextParser.parse_file(args.input)
    if not blocks:
        print(f"{Term.RED}[!] No ciphertext blocks found in {args.input}{Term.END}")
        return []

    print(f"{Term.BLUE}Found {len(blocks)} ciphertext blocks.{Term.END}")
    plains: List[str] = []
    for idx, ct in enumerate(blocks, 1):
        print(f"\n{Term.BOLD}=== Block {idx}/{len(blocks)} ==={Term.END}")
        t0 = time.time()
        if args.cipher == "caesar":
            res = solver.break_caesar(ct)
            print(f"{Term.GREEN}Shift={res.shift}{Term.END}")
        else:
            res = solver.solve_text(ct, method=args.method, key_length=args.key_length)
            if res.kasiski_length is not None:
                print(f"{Term.CYAN}[Kasiski] {res.kasiski_length} "
                      f"candidates={list(res.kasiski_candidates)}{Term.END}")
            if res.friedman_length is not None:
                print(f"{Term.CYAN}[Friedman] {res.friedman_length}{Term.END}")
            print(f"{Term.GREEN}KeyLen={res.key_length} Key={res.key} Score={res.score:.4f}{Term.END}")
        print(f"Done in {time.time()-t0:.2f}s")
        print("\nDecrypted:")
        print(res.plaintext[:1200] + ("..." if len(res.plaintext) > 1200 else ""))
        plains.append(res.plaintext)
    return plains


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Caesar / Vigenère cryptanalysis (frequency, Kasiski, Friedman)")
    ap.add_argument("--reference", "-r", help="Reference text/JSON monogram table, or nltk:<gutenberg fileid>")
    ap.add_argument("--cipher", choices=["caesar", "vigenere"], default="vigenere")
    ap.add_argument("--out", "-o", help="Output path (default: stdout)")

    # Analysis
    ap.add_argument("--frequency", help="Print a letter frequency analysis of FILE")
    ap.add_argument("--by-frequency", action="store_true", help="Sort the frequency analysis by count")
    ap.add_argument("--input", "-i", help="File with ciphertext (optionally triple-quoted blocks) to break")
    ap.add_argument("--method", choices=METHODS, default="friedman", help="How to pick the Vigenère key length")
    ap.add_argument("--key-length", type=int, default=None, help="Skip estimation and use this key length")
    ap.add_argument("--tolerance", type=float, default=None, help="Kasiski candidate tolerance (percent points)")
    ap.add_argument("--workers", type=int, default=None, help="Thread pool cap")

    # Transforms
    ap.add_argument("--encrypt-file", help="Encrypt FILE")
    ap.add_argument("--decrypt-file", help="Decrypt FILE")
    ap.add_argument("--key", help="Vigenère keyword")
    ap.add_argument("--shift", type=int, help="Caesar shift")

    # Generation
    ap.add_argument("--generate", "-g", type=int, help="Generate N sample Vigenère ciphertext blocks")
    ap.add_argument("--words", type=int, default=200, help="Words per generated block")
    ap.add_argument("--min-key", type=int, default=2, help="Min key length for generation")
    ap.add_argument("--max-key", type=int, default=10, help="Max key length for generation")
    ap.add_argument("--seed", type=int, default=None, help="RNG seed for generation")

    ap.add_argument("--verbose", "-v", action="store_true", help="Report every shift, repeat and distance")
    ap.add_argument("--quiet", "-q", action="store_true", help="No progress output")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    config = BreakerConfig.from_env().with_overrides(tolerance=args.tolerance, threads_max=args.workers)
    observer = None if args.quiet else ConsoleReporter(verbose=args.verbose)
    out = Path(args.out) if args.out else None

    try:
        # Mode 1: generate sample ciphertexts
        if args.generate:
            cts, keys, _ = generate_cipher_blocks(
                num_chunks=args.generate, words_per_chunk=args.words,
                keylen_min=args.min_key, keylen_max=args.max_key, seed=args.seed,
            )
            out = out or Path("generated_ciphertexts.txt")
            with _open_out(out) as f:
                f.write(CiphertextParser.format_blocks(cts))
            side = out.with_suffix(".keys.json")
            with _open_out(side) as f:
                json.dump({"keys": keys}, f, indent=2)
            print(f"{Term.GREEN}[+] Wrote {len(cts)} ciphertext blocks to {out}{Term.END}")
            print(f"{Term.YELLOW}[*] Keys saved to {side}{Term.END}")
            return 0

        # Mode 2: frequency analysis
        if args.frequency:
            _print_profile(Path(args.frequency), args.by_frequency)
            return 0

        # Mode 3: encrypt / decrypt a file
        if args.encrypt_file or args.decrypt_file:
            mode = Mode.ENCRYPT if args.encrypt_file else Mode.DECRYPT
            if args.cipher == "caesar":
                if args.shift is None:
                    ap.error("--shift is required for the Caesar cipher")
            elif not args.key:
                if mode is Mode.DECRYPT:
                    ap.error("--key is required to decrypt")
                rng = random.SystemRandom()
                args.key = random_key(rng.randint(2, 10), rng)
                print(f"{Term.YELLOW}[*] Generated key: {args.key}{Term.END}", file=sys.stderr)
            else:
                args.key = vigenere.normalize_keyword(args.key)
            n = _transform_file(Path(args.encrypt_file or args.decrypt_file), out,
                                args.cipher, args.key, args.shift, mode)
            if out is not None:
                print(f"{Term.GREEN}[+] Wrote {n} characters to {out}{Term.END}")
            return 0

        # Mode 4: break ciphertext blocks
        if not args.input:
            ap.error("Either --generate N, --frequency FILE, --encrypt-file/--decrypt-file FILE, "
                     "or --input FILE must be provided.")
        plains = _solve_blocks(args, config, observer)
        if out is not None and plains:
            with _open_out(out) as f:
                write_chars(CiphertextParser.format_blocks(plains) if len(plains) > 1 else plains[0], f)
            print(f"{Term.GREEN}[+] Decrypted text written to {out}{Term.END}")
        return 0
    except BreakerError as e:
        print(f"{Term.RED}[!] {e}{Term.END}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
