"""Random rando generation.

Principles:
- Each call is independent; no state is shared between calls
- Dependency injection: random source and clock can be injected for testing
"""
import random
import string
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from models import Rando
from storage.variants import COLORS

CHARSET = string.ascii_lowercase + string.ascii_uppercase + string.digits

EMAIL_HOSTS = (
    "gmail.com",
    "hotmail.com",
    "yahoo.com",
    "outlook.com",
    "icloud.com",
    "protonmail.com",
)

MAX_AGE_HOURS = 365 * 24


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_millis(moment: datetime) -> datetime:
    """Truncate to millisecond precision, the resolution MongoDB stores"""
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


class RandomRecordGenerator:
    """Produces synthetic randos with consistent timestamps"""

    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Callable[[], datetime] = _utc_now):
        self.rng = rng or random.Random()
        self.clock = clock

    def generate(self) -> Rando:
        """Generate one rando.

        Both variants share the same attribute set; where the identity is
        stored is decided by variant.encode().
        """
        now = _to_millis(self.clock())
        created_at = self._created_at(now)
        return Rando(
            rando_id=self._unique_id(),
            created_at=created_at,
            email=self._email(),
            favorite_color=self.rng.choice(COLORS),
            first_name=self._random_length_string(5, 10),
            last_name=self._random_length_string(5, 10),
            updated_at=self._updated_at(created_at, now),
        )

    def generate_document(self, variant) -> dict:
        """Generate one rando already encoded for the variant's collection"""
        return variant.encode(self.generate())

    def _created_at(self, now: datetime) -> datetime:
        """Whole hours back from now, within the past year"""
        return now - timedelta(hours=self.rng.randrange(0, MAX_AGE_HOURS))

    def _updated_at(self, created_at: datetime, now: datetime) -> datetime:
        """Uniform instant in [created_at, now) at millisecond resolution"""
        span_ms = int((now - created_at) / timedelta(milliseconds=1))
        if span_ms <= 0:
            return created_at
        return created_at + timedelta(milliseconds=self.rng.randrange(0, span_ms))

    def _email(self) -> str:
        return f"{self._random_length_string(10, 15)}@{self.rng.choice(EMAIL_HOSTS)}"

    def _random_length_string(self, minimum: int, maximum: int) -> str:
        """Random string with length in [minimum, maximum)"""
        length = self.rng.randrange(minimum, maximum)
        return "".join(self.rng.choice(CHARSET) for _ in range(length))

    @staticmethod
    def _unique_id() -> str:
        return uuid.uuid4().hex
