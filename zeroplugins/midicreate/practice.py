"""Ear training: guess the note that was played, five rounds per game."""

from __future__ import annotations

import random
import re
from collections.abc import Mapping
from dataclasses import dataclass

from .midi import note_name, parse_note

ROUNDS = 5
ANSWER_PATTERN = re.compile(r"[A-G][b|#]?\d{0,2}")
_LOWEST = 55
_SPAN = 34
_INDIVIDUAL_POINTS = {0: 1.0, 1: 0.5, 2: 0.2}


@dataclass(frozen=True)
class Outcome:
    """What one answer led to."""

    note: int
    correct: bool
    errors: int
    solution: str
    advanced: bool
    finished: bool


class EarTraining:
    """One game; alone a round allows 3 wrong answers, as a team 10."""

    def __init__(self, team: bool = False, rng: random.Random | None = None) -> None:
        self.team = team
        self.max_errors = 10 if team else 3
        self._rng = rng or random.Random()
        self._scores: dict[int, float] = {}
        self.round = 1
        self.errors = 0
        self._new_target()

    def _new_target(self) -> None:
        self.target = _LOWEST + self._rng.randrange(_SPAN)

    @property
    def solution(self) -> str:
        """The current note written as name and octave, e.g. ``C#6``."""
        return note_name(self.target) + str(self.target // 12)

    @property
    def finished(self) -> bool:
        return self.round > ROUNDS

    @property
    def scores(self) -> dict[int, float]:
        """Points per user so far."""
        return dict(self._scores)

    def answer(self, user_id: int, text: str) -> Outcome:
        """Take a guess from a user.

        Raises ValueError when ``text`` is not a note and RuntimeError once
        the game is over.
        """
        if self.finished:
            raise RuntimeError("the game is over")
        if not ANSWER_PATTERN.fullmatch(text):
            raise ValueError(f"not a note: {text!r}")
        note = parse_note(text)
        correct = note == self.target
        if not correct:
            self.errors += 1
        errors = self.errors
        solution = self.solution
        advanced = correct or errors == self.max_errors
        if advanced:
            if self.team:
                if errors != self.max_errors:
                    self._scores[user_id] = self._scores.get(user_id, 0.0) + 1.0
            elif errors in _INDIVIDUAL_POINTS:
                self._scores[user_id] = (
                    self._scores.get(user_id, 0.0) + _INDIVIDUAL_POINTS[errors]
                )
            self.round += 1
            if not self.finished:
                self.errors = 0
                self._new_target()
        return Outcome(note, correct, errors, solution, advanced, self.finished)

    def scoreboard(self, names: Mapping[int, str] | None = None) -> str:
        """One ``name: points`` line per scoring user."""
        names = names or {}
        return "".join(
            f"{names.get(uid, str(uid))}: {points:.1f}\n"
            for uid, points in self._scores.items()
        )