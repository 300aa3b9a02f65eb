from __future__ import annotations

import random
import re

import pytest

from persistence.ids import (
    IdentifierAllocator,
    IdentifierSpaceExhausted,
    generate_numeric_id,
    is_valid_numeric_id,
)


def test_is_valid_numeric_id_bounds():
    assert is_valid_numeric_id(1_000_000_000)
    assert is_valid_numeric_id(9_999_999_999)
    assert not is_valid_numeric_id(999_999_999)
    assert not is_valid_numeric_id(10_000_000_000)
    assert not is_valid_numeric_id(True)
    assert not is_valid_numeric_id("1000000000")
    assert not is_valid_numeric_id(None)


def test_generate_numeric_id_skips_used_values():
    values = iter([1000000001, 1000000001, 1000000002])

    class _Scripted(random.Random):
        def randint(self, a, b):
            return next(values)

    assert generate_numeric_id({1000000001}, rng=_Scripted()) == 1000000002


def test_generate_numeric_id_gives_up_after_cap():
    class _Stuck(random.Random):
        def randint(self, a, b):
            return 1000000001

    with pytest.raises(IdentifierSpaceExhausted) as exc:
        generate_numeric_id({1000000001}, rng=_Stuck(), max_attempts=3)
    assert exc.value.attempts == 3


def test_allocator_tokens_have_expected_shape_and_never_repeat():
    allocator = IdentifierAllocator()
    tokens = [allocator.allocate() for _ in range(500)]
    assert len(set(tokens)) == 500
    assert all(re.fullmatch(r"_[0-9a-z]{9}", t) for t in tokens)
    assert tokens[0] in allocator
    assert len(allocator) == 500


def test_allocator_retries_past_used_tokens():
    scripted = iter(["_a", "_a", "_b"])
    allocator = IdentifierAllocator(token_factory=lambda: next(scripted))
    assert allocator.allocate() == "_a"
    assert allocator.allocate() == "_b"


def test_allocators_do_not_share_state():
    first = IdentifierAllocator(token_factory=lambda: "_same")
    second = IdentifierAllocator(token_factory=lambda: "_same")
    assert first.allocate() == "_same"
    assert second.allocate() == "_same"


def test_allocator_exhaustion_raises():
    allocator = IdentifierAllocator(max_attempts=4, token_factory=lambda: "_only")
    allocator.allocate()
    with pytest.raises(IdentifierSpaceExhausted):
        allocator.allocate()
