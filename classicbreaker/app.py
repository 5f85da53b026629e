#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import os
import time
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from . import caesar, friedman, kasiski, vigenere
from .config import BreakerConfig
from .corpus import resolve_reference
from .errors import BreakerError
from .solver import METHODS, VigenereSolver
from .report import EventLog
from .utils import ALPH, LetterProfile, clean_lower_letters


class BadRequest(Exception):
    pass


def _json() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _required_text(data: Dict[str, Any], field: str) -> str:
    text = data.get(field)
    if not isinstance(text, str) or not text.strip():
        raise BadRequest(f"{field} required")
    return text


def _int_field(data: Dict[str, Any], field: str, default: Optional[int] = None) -> Optional[int]:
    value = data.get(field, default)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{field} must be an integer")


def _profile_json(profile: LetterProfile) -> Dict[str, Any]:
    return {
        "counts": dict(zip(ALPH, profile.counts)),
        "total": profile.total,
        "frequencies": dict(zip(ALPH, profile.frequencies())),
        "ioc": profile.index_of_coincidence,
    }


def create_app(config: Optional[BreakerConfig] = None,
               reference: Optional[LetterProfile] = None) -> Flask:
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET", os.urandom(24).hex())
    app.config["BREAKER"] = config or BreakerConfig.from_env()
    app.config["REFERENCE"] = reference or resolve_reference(app.config["BREAKER"].reference_path)

    def _solver() -> VigenereSolver:
        return VigenereSolver(app.config["REFERENCE"], app.config["BREAKER"])

    @app.errorhandler(BadRequest)
    def _bad_request(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(BreakerError)
    def _breaker_error(e):
        return jsonify({"error": str(e)}), 400

    @app.post("/api/profile")
    def api_profile():
        text = _required_text(_json(), "text")
        return jsonify(_profile_json(LetterProfile.from_text(clean_lower_letters(text))))

    @app.post("/api/caesar/<action>")
    def api_caesar(action: str):
        data = _json()
        if action == "break":
            res = _solver().break_caesar(_required_text(data, "ciphertext"))
            return jsonify({
                "shift": res.shift,
                "plaintext": res.plaintext,
                "ranked": [{"shift": d.shift, "deviation": d.deviation} for d in res.ranked],
            })
        if action not in ("encrypt", "decrypt"):
            return jsonify({"error": f"unknown action {action}"}), 404
        text = _required_text(data, "text")
        shift = _int_field(data, "shift")
        if shift is None:
            raise BadRequest("shift required")
        fn = caesar.encrypt if action == "encrypt" else caesar.decrypt
        return jsonify({"text": fn(text, shift)})

    @app.post("/api/vigenere/<action>")
    def api_vigenere(action: str):
        data = _json()
        if action == "break":
            text = _required_text(data, "ciphertext")
            method = data.get("method", "friedman")
            if method not in METHODS:
                raise BadRequest(f"method must be one of {', '.join(METHODS)}")
            t0 = time.time()
            res = _solver().solve_text(text, method=method, key_length=_int_field(data, "key_length"))
            return jsonify({
                "key_length": res.key_length,
                "key": res.key,
                "plaintext": res.plaintext,
                "score": res.score,
                "kasiski": res.kasiski_length,
                "kasiski_candidates": list(res.kasiski_candidates),
                "friedman": res.friedman_length,
                "elapsed": time.time() - t0,
            })
        if action not in ("encrypt", "decrypt"):
            return jsonify({"error": f"unknown action {action}"}), 404
        text = _required_text(data, "text")
        key = data.get("key") or ""
        fn = vigenere.encrypt if action == "encrypt" else vigenere.decrypt
        return jsonify({"text": fn(text, key)})

    @app.post("/api/kasiski")
    def api_kasiski():
        cfg: BreakerConfig = app.config["BREAKER"]
        letters = clean_lower_letters(_required_text(_json(), "ciphertext"))
        repeats = kasiski.find_repeats(letters, cfg.min_factor, cfg.max_factor)
        distances = kasiski.compute_distances(letters, repeats)
        tally = kasiski.factorize(distances, cfg.min_factor, cfg.max_factor)
        return jsonify({
            "key_length": kasiski.find_key_length(tally, len(repeats)),
            "candidates": list(kasiski.find_key_lengths(tally, len(repeats), cfg.tolerance)),
            "repeats": repeats,
            "distances": distances,
            "factors": [{"divisor": r.divisor, "count": r.count, "percentage": r.percentage}
                        for r in kasiski.rank_factors(tally, len(repeats))],
        })

    @app.post("/api/friedman")
    def api_friedman():
        cfg: BreakerConfig = app.config["BREAKER"]
        data = _json()
        letters = clean_lower_letters(_required_text(data, "ciphertext"))
        if not letters:
            raise BadRequest("ciphertext contains no letters")
        ref_ioc = data.get("reference_ioc")
        try:
            ref_ioc = float(ref_ioc) if ref_ioc is not None else app.config["REFERENCE"].index_of_coincidence
        except (TypeError, ValueError):
            raise BadRequest("reference_ioc must be a number")
        log = EventLog()
        length = friedman.friedman_test(letters, ref_ioc, cfg.min_key_length, cfg.max_key_length, observer=log)
        return jsonify({
            "key_length": length,
            "reference_ioc": ref_ioc,
            "average_ioc": {e.key_length: e.average_ioc for e in log},
        })

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "5000")), debug=True)
