"""Vocabulary entities shared by ingestion, training and persistence."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional


class WordCategory(str, Enum):
    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    FUNCTION = "function"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["WordCategory"]:
        """Return the matching category, or None for missing/unknown values."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class MasteryLevel(str, Enum):
    NEW = "new"
    AGAIN = "again"
    MEDIUM = "medium"
    GOOD = "good"
    MASTERED = "mastered"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["MasteryLevel"]:
        """Return the matching level, or None for missing/unknown values."""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


def normalize_word(word: str) -> str:
    """Key used for the per-learner uniqueness rule."""
    return (word or "").strip().lower()


@dataclass(frozen=True)
class VocabularyCandidate:
    """A word or phrase extracted from a page, not yet persisted."""

    word: str
    translation: str = ""
    explanation: str = ""
    literal_translation: Optional[str] = None
    category: Optional[WordCategory] = None
    base_form: Optional[str] = None
    tense: Optional[str] = None
    person: Optional[str] = None
    context_sentence: Optional[str] = None


@dataclass(frozen=True)
class VocabularyItem:
    """A learned word or phrase.

    ``mastery_level`` is the only mastery state held in memory. The legacy
    ``mastered`` flag is derived when serializing and only read when loading
    records written before mastery levels existed.
    """

    id: str
    word: str
    translation: str
    explanation: str
    added_at: int
    mastery_level: MasteryLevel = MasteryLevel.NEW
    literal_translation: Optional[str] = None
    category: Optional[WordCategory] = None
    base_form: Optional[str] = None
    tense: Optional[str] = None
    person: Optional[str] = None
    context_sentence: Optional[str] = None

    @property
    def normalized_word(self) -> str:
        return normalize_word(self.word)

    def with_mastery(self, level: MasteryLevel) -> "VocabularyItem":
        return replace(self, mastery_level=MasteryLevel(level))

    @classmethod
    def from_candidate(
        cls, candidate: VocabularyCandidate, item_id: str, added_at: int
    ) -> "VocabularyItem":
        return cls(
            id=item_id,
            word=candidate.word.strip(),
            translation=candidate.translation or "",
            explanation=candidate.explanation or "",
            added_at=added_at,
            mastery_level=MasteryLevel.NEW,
            literal_translation=candidate.literal_translation,
            category=candidate.category,
            base_form=candidate.base_form,
            tense=candidate.tense,
            person=candidate.person,
            context_sentence=candidate.context_sentence,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the stored JSON shape (camelCase, legacy flag included)."""
        return {
            "id": self.id,
            "word": self.word,
            "translation": self.translation,
            "explanation": self.explanation,
            "literalTranslation": self.literal_translation,
            "category": self.category.value if self.category else None,
            "baseForm": self.base_form,
            "tense": self.tense,
            "person": self.person,
            "contextSentence": self.context_sentence,
            "addedAt": self.added_at,
            "masteryLevel": self.mastery_level.value,
            "mastered": self.mastery_level is MasteryLevel.MASTERED,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], item_id: Optional[str] = None) -> "VocabularyItem":
        """Load a stored record, normalizing legacy items without a mastery level."""
        mastery = MasteryLevel.parse(data.get("masteryLevel"))
        if mastery is None:
            mastery = MasteryLevel.MASTERED if data.get("mastered") else MasteryLevel.NEW
        return cls(
            id=item_id or data.get("id") or "",
            word=(data.get("word") or "").strip(),
            translation=data.get("translation") or "",
            explanation=data.get("explanation") or "",
            added_at=int(data.get("addedAt") or 0),
            mastery_level=mastery,
            literal_translation=data.get("literalTranslation"),
            category=WordCategory.parse(data.get("category")),
            base_form=data.get("baseForm"),
            tense=data.get("tense"),
            person=data.get("person"),
            context_sentence=data.get("contextSentence"),
        )
