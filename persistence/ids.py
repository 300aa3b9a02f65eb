from __future__ import annotations

import logging
import random
import string
import threading
from typing import Callable, Collection

logger = logging.getLogger(__name__)

MIN_NUMERIC_ID = 1_000_000_000
MAX_NUMERIC_ID = 9_999_999_999

TOKEN_PREFIX = "_"
TOKEN_ALPHABET = string.digits + string.ascii_lowercase
TOKEN_LENGTH = 9

DEFAULT_MAX_ATTEMPTS = 10_000


class IdentifierSpaceExhausted(RuntimeError):
    """Raised when no unused identifier was found within the attempt cap."""

    def __init__(self, attempts: int):
        super().__init__(f"no unused identifier found after {attempts} attempts")
        self.attempts = attempts


def is_valid_numeric_id(value: object) -> bool:
    # bool is a subclass of int; True must not pass as an id.
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_NUMERIC_ID <= value <= MAX_NUMERIC_ID


def generate_numeric_id(
    used: Collection[object],
    *,
    rng: random.Random | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> int:
    """
    Return a uniformly random 10-digit id that is not in `used`.

    The caller owns `used` and is responsible for adding the returned id to it.
    """
    source = rng if rng is not None else random
    for attempt in range(1, max_attempts + 1):
        candidate = source.randint(MIN_NUMERIC_ID, MAX_NUMERIC_ID)
        if candidate not in used:
            if attempt > 1:
                logger.debug("ID GEN: numeric id found after %d attempts", attempt)
            return candidate
    raise IdentifierSpaceExhausted(max_attempts)


class IdentifierAllocator:
    """
    Hands out short opaque tokens like "_k3j9x0q2a", never the same one twice.

    Construct one per process and pass it to whoever needs tokens. The used-set
    only grows; it is never pruned.
    """

    def __init__(
        self,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        token_factory: Callable[[], str] | None = None,
    ) -> None:
        self._guard = threading.Lock()
        self._used: set[str] = set()
        self._max_attempts = max_attempts
        self._token_factory = token_factory or _random_token

    def allocate(self) -> str:
        with self._guard:
            for _ in range(self._max_attempts):
                token = self._token_factory()
                if token not in self._used:
                    self._used.add(token)
                    return token
        raise IdentifierSpaceExhausted(self._max_attempts)

    def __contains__(self, token: object) -> bool:
        with self._guard:
            return token in self._used

    def __len__(self) -> int:
        with self._guard:
            return len(self._used)


def _random_token() -> str:
    return TOKEN_PREFIX + "".join(random.choices(TOKEN_ALPHABET, k=TOKEN_LENGTH))
