"""
Concept Tracker: per-concept performance and within-session spaced repetition.

Tracks:
- A rolling window of the last answers (difficulty signal)
- One ConceptRecord per (domain, concept) pair
- A global prompt counter used to space out repeats of missed concepts
"""

from __future__ import annotations

import random
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

from loguru import logger

from pacing.core.recall import RecallSelector


class DifficultyAdjustment(IntEnum):
    """Signal telling activities to ease off, hold, or push."""

    EASIER = -1
    MAINTAIN = 0
    HARDER = 1


@dataclass
class ConceptRecord:
    """Performance record for a single concept within a domain."""

    concept: str
    domain: str
    attempts: int = 0
    misses: int = 0
    last_seen_index: int = 0
    needs_repeat: bool = False


@dataclass
class TrackerConfig:
    """Configuration for the concept tracker."""

    window_size: int = 5
    min_samples: int = 3
    harder_at: int = 4  # correct answers in window
    easier_at: int = 1
    repeat_gap: int = 2  # prompts between a miss and its repeat

    def __post_init__(self):
        if self.window_size < 1:
            raise ValueError("window_size must be at least 1")
        if self.repeat_gap < 1:
            raise ValueError("repeat_gap must be at least 1")


class ConceptTracker:
    """
    Track answers per concept and surface concepts due for repetition.

    A missed concept is flagged needs_repeat and becomes eligible again
    once at least `repeat_gap` other prompts have been shown.
    """

    def __init__(self, config: TrackerConfig | None = None, rng: random.Random | None = None):
        self.config = config or TrackerConfig()
        self.rng = rng
        self._window: deque[bool] = deque(maxlen=self.config.window_size)
        self._records: dict[tuple[str, str], ConceptRecord] = {}
        self._prompt_counter = 0
        self._selectors: dict[str, RecallSelector[str]] = {}

    @property
    def prompt_counter(self) -> int:
        return self._prompt_counter

    @property
    def window(self) -> list[bool]:
        return list(self._window)

    @property
    def recent_correct_rate(self) -> float:
        """Fraction correct in the rolling window (1.0 when empty)."""
        if not self._window:
            return 1.0
        return sum(self._window) / len(self._window)

    def record_answer(self, concept: str, domain: str, correct: bool) -> ConceptRecord:
        """
        Record an answer for a concept.

        Args:
            concept: The concept shown (e.g. "red", "C")
            domain: Its domain (e.g. "color", "letter")
            correct: Whether the learner answered correctly

        Returns:
            The updated ConceptRecord
        """
        self._window.append(correct)

        record = self._records.get((domain, concept))
        if record is None:
            record = ConceptRecord(concept=concept, domain=domain)
            self._records[(domain, concept)] = record

        record.attempts += 1
        if not correct:
            record.misses += 1
            record.needs_repeat = True
        record.last_seen_index = self._prompt_counter
        self._prompt_counter += 1

        logger.debug(
            f"Answer {domain}:{concept} correct={correct} "
            f"(attempts={record.attempts}, misses={record.misses})"
        )
        return record

    def get_difficulty_adjustment(self) -> DifficultyAdjustment:
        """Difficulty signal from the rolling window."""
        if len(self._window) < self.config.min_samples:
            return DifficultyAdjustment.MAINTAIN

        correct_count = sum(self._window)
        if correct_count >= self.config.harder_at:
            return DifficultyAdjustment.HARDER
        if correct_count <= self.config.easier_at:
            return DifficultyAdjustment.EASIER
        return DifficultyAdjustment.MAINTAIN

    def get_repeat_concepts(self, domain: str) -> list[str]:
        """Missed concepts in a domain that have not been seen for repeat_gap prompts."""
        return [
            record.concept
            for record in self._records.values()
            if record.domain == domain
            and record.needs_repeat
            and self._prompt_counter - record.last_seen_index >= self.config.repeat_gap
        ]

    def mark_repeated(self, concept: str, domain: str) -> None:
        """Clear the repeat flag after a flagged concept was deliberately re-served."""
        record = self._records.get((domain, concept))
        if record is None:
            return
        record.needs_repeat = False
        record.last_seen_index = self._prompt_counter
        logger.debug(f"Re-served {domain}:{concept}")

    def get_record(self, concept: str, domain: str) -> ConceptRecord | None:
        return self._records.get((domain, concept))

    def records(self, domain: str | None = None) -> list[ConceptRecord]:
        return [r for r in self._records.values() if domain is None or r.domain == domain]

    def next_concept(self, domain: str, pool: Sequence[str]) -> str:
        """
        Choose the next concept to present from a pool.

        Concepts due for repetition are preferred, then concepts not yet
        shown this session; the previous pick is avoided when possible.

        Args:
            domain: Domain of the pool
            pool: Non-empty list of candidate concepts

        Returns:
            The chosen concept
        """
        due = set(self.get_repeat_concepts(domain))
        selector = self._selectors.get(domain)
        if selector is None:
            selector = RecallSelector(rng=self.rng)
            self._selectors[domain] = selector

        concept = selector.pick(pool, is_due=lambda c: c in due)
        if concept in due:
            self.mark_repeated(concept, domain)
        return concept

    def reset(self) -> None:
        """Clear everything (session boundary)."""
        self._window.clear()
        self._records.clear()
        self._prompt_counter = 0
        for selector in self._selectors.values():
            selector.reset()
        logger.debug("Concept tracker reset")
