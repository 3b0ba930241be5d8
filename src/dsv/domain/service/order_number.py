"""Order number generation: ``DSV`` + YYMMDD + 6 random characters.

Example: ``DSV2412250A3B5C``.  The suffix alphabet has 36 symbols, so there
are 36**6 (about 2.2 billion) numbers per calendar day.
"""

from __future__ import annotations

import random
import secrets
from collections.abc import Callable
from datetime import datetime, timezone, tzinfo

PREFIX = "DSV"
SUFFIX_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
SUFFIX_LENGTH = 6


class OrderNumberGenerator:
    """Builds order numbers from an explicitly supplied random source.

    Production code uses ``secrets.SystemRandom``; tests can pass a seeded
    ``random.Random`` and a fixed clock.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        tz: tzinfo = timezone.utc,
        clock: Callable[[tzinfo], datetime] | None = None,
    ) -> None:
        self._rng = rng or secrets.SystemRandom()
        self._tz = tz
        self._clock = clock or (lambda zone: datetime.now(zone))

    def generate(self) -> str:
        today = self._clock(self._tz)
        suffix = "".join(
            self._rng.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH)
        )
        return f"{PREFIX}{today:%y%m%d}{suffix}"
