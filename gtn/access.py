"""Password gate for protected notes."""

from __future__ import annotations

import logging
import secrets

from gtn.models import Note

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3


def check_password(note: Note, attempt: str) -> bool:
    """True if *attempt* opens *note*. Unprotected notes are always open."""
    if not note.is_protected:
        return True
    return secrets.compare_digest(attempt.encode("utf-8"), note.password.encode("utf-8"))


class AccessGate:
    """Counts password attempts against one protected note.

    A wrong password is reported by returning False. Once ``max_attempts``
    wrong passwords have been given the gate stays shut, even for the right
    password.
    """

    def __init__(self, note: Note, max_attempts: int = DEFAULT_ATTEMPTS) -> None:
        self.note = note
        self.max_attempts = max(1, max_attempts)
        self.failures = 0
        self.granted = not note.is_protected

    @property
    def attempts_left(self) -> int:
        return max(0, self.max_attempts - self.failures)

    @property
    def exhausted(self) -> bool:
        return not self.granted and self.attempts_left == 0

    def check(self, attempt: str) -> bool:
        """Judge one attempt on its own merits.

        Failures are counted as in ``try_password`` but success is not
        remembered, so every later call needs the right password again.
        """
        if self.attempts_left == 0:
            logger.info("No attempts left for %r", self.note.title)
            return False
        if check_password(self.note, attempt):
            logger.info("Access granted to %r", self.note.title)
            return True
        self.failures += 1
        logger.info(
            "Incorrect password for %r (%d/%d)", self.note.title, self.failures, self.max_attempts
        )
        return False

    def try_password(self, attempt: str) -> bool:
        if not self.granted:
            self.granted = self.check(attempt)
        return self.granted

    def reveal(self) -> str | None:
        """The note's detail block once access is granted, else None."""
        return self.note.render_detail() if self.granted else None
