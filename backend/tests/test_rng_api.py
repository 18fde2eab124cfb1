"""Library API tests over the default shared generator."""
import hashlib

import pytest

from rngbridge.errors import InvalidArgument
from rngbridge.logic import rng
from rngbridge.logic.mt19937 import INT31_MAX, Generator


REFERENCE_KEY = [0x123, 0x234, 0x345, 0x456]


@pytest.fixture(autouse=True)
def reseed_default():
    """Leave the shared generator in a known state for every test."""
    rng.seed_with_array(REFERENCE_KEY)
    yield
    rng.seed(5489)


def test_seed_with_array_drives_module_functions():
    assert rng.next_int31() == 1067595299 >> 1
    assert rng.next_int_in_range(0, 10) == (955945823 >> 1) // (INT31_MAX // 10)
    assert rng.next_float() == (477289528 >> 8) / 2**24


def test_seed_with_array_count_limits_words():
    rng.seed_with_array(REFERENCE_KEY + [1, 2, 3], 4)
    assert rng.get_default_generator().next_u32() == 1067595299


def test_seed_with_array_rejects_625_words():
    with pytest.raises(InvalidArgument):
        rng.seed_with_array(list(range(625)), 625)


def test_empty_seed_array_uses_fallback(monkeypatch):
    monkeypatch.setattr(rng, "fallback_seed_words", lambda: [42])
    rng.seed_with_array([])

    expected = Generator()
    expected.seed_array([42])
    assert rng.next_int31() == expected.random_int31()


def test_zero_count_with_numbers_is_rejected(monkeypatch):
    def fail():
        raise AssertionError("entropy fallback must not run")

    monkeypatch.setattr(rng, "fallback_seed_words", fail)
    before = rng.get_default_generator().getstate()

    with pytest.raises(InvalidArgument):
        rng.seed_with_array(REFERENCE_KEY, 0)

    assert rng.get_default_generator().getstate() == before


def test_fallback_seed_words_in_range():
    for _ in range(100):
        words = rng.fallback_seed_words()
        assert len(words) == 1
        assert 1 <= words[0] < INT31_MAX


def test_next_int_in_range_rejects_empty_range():
    with pytest.raises(InvalidArgument):
        rng.next_int_in_range(5, 5)
    with pytest.raises(InvalidArgument):
        rng.next_int_in_range(10, 3)


def test_scalar_seed():
    rng.seed(5489)
    assert rng.get_default_generator().next_u32() == 3499211612


def test_next_double_and_uniform_in_bounds():
    for _ in range(200):
        assert 0.0 <= rng.next_double() < 1.0
        assert 3.0 <= rng.next_uniform(3.0, 4.0) < 4.0


def test_seed_words_from_text_is_sha256_split():
    words = rng.seed_words_from_text("match-42")
    digest = hashlib.sha256(b"match-42").hexdigest()
    assert len(words) == 8
    assert words[0] == int(digest[:8], 16)
    assert words[7] == int(digest[56:], 16)
    assert rng.seed_words_from_text("match-42") == words
    assert rng.seed_words_from_text("match-43") != words
