import pytest

from classicbreaker.config import BreakerConfig, thread_budget


def test_defaults():
    cfg = BreakerConfig()
    assert (cfg.min_factor, cfg.max_factor) == (2, 10)
    assert (cfg.min_key_length, cfg.max_key_length) == (2, 10)
    assert cfg.tolerance == 15.0
    assert cfg.reference_path is None


def test_from_env():
    cfg = BreakerConfig.from_env({
        "REFERENCE_PATH": "novel.txt",
        "BREAKER_THREADS_MAX": "3",
        "KASISKI_TOLERANCE": "20",
    })
    assert cfg.reference_path == "novel.txt"
    assert cfg.threads_max == 3
    assert cfg.tolerance == 20.0


def test_from_env_ignores_garbage():
    cfg = BreakerConfig.from_env({"BREAKER_THREADS_MAX": "lots", "KASISKI_TOLERANCE": ""})
    assert cfg.threads_max == 2
    assert cfg.tolerance == 15.0


def test_with_overrides_skips_none():
    cfg = BreakerConfig().with_overrides(tolerance=None, threads_max=8)
    assert cfg.tolerance == 15.0
    assert cfg.threads_max == 8


@pytest.mark.parametrize("kwargs", [
    {"min_factor": 5, "max_factor": 4},
    {"min_key_length": 0},
    {"tolerance": -1.0},
])
def test_rejects_bad_ranges(kwargs):
    with pytest.raises(ValueError):
        BreakerConfig(**kwargs)


def test_thread_budget_is_at_least_one():
    assert thread_budget(0) == 1
    assert 1 <= BreakerConfig(threads_max=64).workers <= 64
