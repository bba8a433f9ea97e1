"""Training Session Engine - filtered, shuffled practice over the vocabulary."""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional

from spanish_reader.core import MasteryLevel, VocabularyItem, WordCategory
from spanish_reader.io import PersistenceGateway

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "other"
SELECTABLE_CATEGORIES = ("noun", "verb", "adjective", OTHER_CATEGORY)
RATING_LEVELS = (
    MasteryLevel.AGAIN,
    MasteryLevel.MEDIUM,
    MasteryLevel.GOOD,
    MasteryLevel.MASTERED,
)


class NoMatchingVocabularyError(ValueError):
    """Raised when a session filter leaves nothing to practise."""


class CardPhase(str, Enum):
    HIDDEN = "hidden"
    REVEALED = "revealed"


def category_key(item: VocabularyItem) -> str:
    """Filter bucket of an item; anything but noun/verb/adjective is "other"."""
    if item.category in (WordCategory.NOUN, WordCategory.VERB, WordCategory.ADJECTIVE):
        return item.category.value
    return OTHER_CATEGORY


@dataclass(frozen=True)
class TrainingConfig:
    """Which items a session practises.

    Attributes:
        categories: Subset of ``SELECTABLE_CATEGORIES``.
        mastery_levels: Accepted mastery levels.
        verbs_base_form_only: Drop verbs whose base form differs from the word.
    """

    categories: FrozenSet[str] = frozenset({"noun", "verb", "adjective"})
    mastery_levels: FrozenSet[MasteryLevel] = frozenset(
        {MasteryLevel.NEW, MasteryLevel.AGAIN, MasteryLevel.MEDIUM}
    )
    verbs_base_form_only: bool = False

    def __post_init__(self) -> None:
        unknown = set(self.categories) - set(SELECTABLE_CATEGORIES)
        if unknown:
            raise ValueError(f"Unknown categories: {sorted(unknown)}")

    def matches(self, item: VocabularyItem) -> bool:
        category = category_key(item)
        if category not in self.categories or item.mastery_level not in self.mastery_levels:
            return False
        if (
            category == WordCategory.VERB.value
            and self.verbs_base_form_only
            and item.base_form
            and item.base_form != item.word
        ):
            return False
        return True


@dataclass
class TrainingSession:
    """Fixed card queue of one session. Cards are never requeued."""

    queue: List[VocabularyItem]
    index: int = 0
    phase: CardPhase = CardPhase.HIDDEN
    ratings: List[MasteryLevel] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.index >= len(self.queue)

    @property
    def current_card(self) -> Optional[VocabularyItem]:
        return None if self.finished else self.queue[self.index]

    @property
    def remaining(self) -> int:
        return max(len(self.queue) - self.index, 0)


class TrainingSessionEngine:
    """
    Builds and advances practice sessions.

    Ratings only tag a static mastery level; nothing is scheduled.
    """

    def __init__(self, gateway: PersistenceGateway, rng: Optional[random.Random] = None):
        if gateway is None:
            raise ValueError("PersistenceGateway must not be None")
        self.gateway = gateway
        self._rng = rng or random.Random()
        self.vocabulary: List[VocabularyItem] = []
        self.session: Optional[TrainingSession] = None

    async def refresh_vocabulary(self) -> List[VocabularyItem]:
        self.vocabulary = await self.gateway.list_vocabulary()
        return self.vocabulary

    def matching_items(self, config: TrainingConfig) -> List[VocabularyItem]:
        return [item for item in self.vocabulary if config.matches(item)]

    def start_session(self, config: TrainingConfig) -> TrainingSession:
        """Start a session over the loaded vocabulary.

        Raises:
            NoMatchingVocabularyError: If no item passes the filter. No session
                is created in that case.
        """
        queue = self.matching_items(config)
        if not queue:
            raise NoMatchingVocabularyError("No vocabulary matches this selection")
        self._rng.shuffle(queue)
        self.session = TrainingSession(queue=queue)
        logger.info("Training session started with %d cards", len(queue))
        return self.session

    @property
    def current_card(self) -> Optional[VocabularyItem]:
        return self.session.current_card if self.session else None

    @property
    def is_active(self) -> bool:
        return self.session is not None and not self.session.finished

    def reveal(self) -> None:
        """Show translation and explanation of the current card. Storage is untouched."""
        if not self.is_active:
            raise RuntimeError("No active training session")
        self.session.phase = CardPhase.REVEALED

    async def rate(self, level: MasteryLevel) -> Optional[VocabularyItem]:
        """Store the rating of the current card and move to the next one.

        Returns:
            The next card, or None when the session just ended.
        """
        if not self.is_active:
            raise RuntimeError("No active training session")
        level = MasteryLevel(level)
        if level not in RATING_LEVELS:
            raise ValueError(f"Cards cannot be rated '{level.value}'")

        session = self.session
        card = session.current_card
        await self.gateway.update_mastery_level(card.id, level)
        session.queue[session.index] = card.with_mastery(level)
        session.ratings.append(level)
        session.index += 1
        session.phase = CardPhase.HIDDEN

        if session.finished:
            logger.info("Training session finished after %d cards", len(session.queue))
            await self.refresh_vocabulary()
            return None
        return session.current_card

    def end_session(self) -> None:
        self.session = None
