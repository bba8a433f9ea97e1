"""Page analysis entities - sentences and their lexical tokens.

A token is one of three variants:

- ``Punctuation``: symbols, marks or standalone spaces.
- ``Word``: a single lexical unit with its grammatical analysis.
- ``Phrase``: a multi-word unit (e.g. a reflexive verb) that carries the
  analysis of the whole phrase plus the ``Word``s composing it.

A phrase only ever contains plain words, so the token tree is at most two
levels deep.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .vocabulary_entities import WordCategory


@dataclass(frozen=True)
class Punctuation:
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"word": self.text, "type": "punctuation"}


@dataclass(frozen=True)
class Word:
    text: str
    translation: Optional[str] = None
    explanation: Optional[str] = None
    literal_translation: Optional[str] = None
    category: Optional[WordCategory] = None
    base_form: Optional[str] = None
    tense: Optional[str] = None
    person: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.text,
            "type": "word",
            "translation": self.translation,
            "explanation": self.explanation,
            "literalTranslation": self.literal_translation,
            "category": self.category.value if self.category else None,
            "baseForm": self.base_form,
            "tense": self.tense,
            "person": self.person,
        }


@dataclass(frozen=True)
class Phrase(Word):
    sub_words: Tuple[Word, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.sub_words:
            raise ValueError(f"Phrase '{self.text}' needs at least one sub-word")
        if any(isinstance(sub, Phrase) for sub in self.sub_words):
            raise ValueError(f"Phrase '{self.text}' cannot contain nested phrases")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["subWords"] = [sub.to_dict() for sub in self.sub_words]
        return data


LexicalToken = Union[Punctuation, Word, Phrase]


def _word_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "text": data.get("word") or "",
        "translation": data.get("translation"),
        "explanation": data.get("explanation"),
        "literal_translation": data.get("literalTranslation"),
        "category": WordCategory.parse(data.get("category")),
        "base_form": data.get("baseForm"),
        "tense": data.get("tense"),
        "person": data.get("person"),
    }


def token_from_dict(data: Dict[str, Any]) -> LexicalToken:
    """Build a token from the analysis JSON shape.

    Tokens without an explicit type are treated as words. Sub-words of a
    sub-word are ignored.
    """
    if data.get("type") == "punctuation":
        return Punctuation(text=data.get("word") or "")

    sub_words = tuple(
        Word(**_word_fields(sub))
        for sub in data.get("subWords") or []
        if sub.get("type") != "punctuation"
    )
    if sub_words:
        return Phrase(sub_words=sub_words, **_word_fields(data))
    return Word(**_word_fields(data))


@dataclass(frozen=True)
class Sentence:
    original: str
    translation: str
    tokens: Tuple[LexicalToken, ...] = ()

    @property
    def words(self) -> List[Word]:
        """Top-level lexical tokens (words and phrases) in document order."""
        return [token for token in self.tokens if isinstance(token, Word)]

    def reconstructed_text(self) -> str:
        return "".join(token.text for token in self.tokens)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "translation": self.translation,
            "words": [token.to_dict() for token in self.tokens],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sentence":
        return cls(
            original=data.get("original") or "",
            translation=data.get("translation") or "",
            tokens=tuple(token_from_dict(t) for t in data.get("words") or []),
        )


@dataclass(frozen=True)
class PageAnalysisResult:
    sentences: Tuple[Sentence, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"sentences": [s.to_dict() for s in self.sentences]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageAnalysisResult":
        return cls(
            sentences=tuple(Sentence.from_dict(s) for s in data.get("sentences") or [])
        )


@dataclass(frozen=True)
class PersistedAnalysis:
    """An analysis cached on the device together with its source image."""

    analysis: PageAnalysisResult
    image: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.analysis.to_dict(),
            "image": self.image,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersistedAnalysis":
        return cls(
            analysis=PageAnalysisResult.from_dict(data.get("data") or {}),
            image=data.get("image") or "",
            timestamp=int(data.get("timestamp") or 0),
        )
