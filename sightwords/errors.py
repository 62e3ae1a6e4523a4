from __future__ import annotations

"""Exceptions surfaced to the practitioner as blocking messages."""


class SightWordsError(Exception):
    """Base class for user-facing failures."""


class InsufficientWordsError(SightWordsError):
    """Fewer target words than a mode requires; redirect to word configuration."""

    def __init__(self, have: int, need: int) -> None:
        super().__init__(f"Please set up at least {need} target words first! (currently {have})")
        self.have = have
        self.need = need


class ModeUnavailableError(SightWordsError):
    """The requested mode is locked or already completed."""


class InvalidParticipantConfig(SightWordsError):
    """Participant profile rejected; nothing was persisted."""


class SessionStateError(SightWordsError):
    """Engine or context used outside its lifecycle (e.g. two active sessions)."""
