from __future__ import annotations

import logging
import secrets
import string
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from paster.errors import IdSpaceExhausted


logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 12
MAX_ID_ATTEMPTS = 30


@dataclass(frozen=True)
class IdGenerator:
    """
    Mints short paste ids.

    Ids are ``length`` symbols drawn from ``alphabet``. ``mint`` keeps drawing
    until the ``exists`` check passes, giving up after ``max_attempts`` with
    ``IdSpaceExhausted``. Tests shrink the alphabet to force exhaustion.
    """

    alphabet: str = ID_ALPHABET
    length: int = ID_LENGTH
    max_attempts: int = MAX_ID_ATTEMPTS
    choice: Callable[[Sequence[str]], str] = secrets.choice

    def __post_init__(self) -> None:
        if not self.alphabet:
            raise ValueError("alphabet must not be empty.")
        if self.length < 1:
            raise ValueError("length must be >= 1.")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")

    def candidate(self) -> str:
        return "".join(self.choice(self.alphabet) for _ in range(self.length))

    def mint(self, exists: Callable[[str], bool]) -> str:
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.candidate()
            if not exists(candidate):
                return candidate
            logger.debug(
                "Paste id collision",
                extra={"event": "paste_id_collision", "attempts": attempt},
            )

        raise IdSpaceExhausted(
            f"No free paste id found after {self.max_attempts} attempts."
        )
