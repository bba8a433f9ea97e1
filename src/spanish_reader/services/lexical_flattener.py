"""Lexical flattening - turns analysed sentences into flat word lists."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from spanish_reader.core import Phrase, Sentence, VocabularyCandidate, Word


@dataclass(frozen=True)
class LexicalQueueEntry:
    """One step of the word-by-word reading phase.

    ``parent_phrase`` is the surface text of the phrase a sub-word belongs
    to, for highlighting. It is None for top-level words and phrases.
    """

    word: Word
    parent_phrase: Optional[str] = None

    @property
    def is_sub_word(self) -> bool:
        return self.parent_phrase is not None


def _candidate(word: Word, context_sentence: str) -> VocabularyCandidate:
    return VocabularyCandidate(
        word=word.text,
        translation=word.translation or "",
        explanation=word.explanation or "",
        literal_translation=word.literal_translation,
        category=word.category,
        base_form=word.base_form,
        tense=word.tense,
        person=word.person,
        context_sentence=context_sentence,
    )


def build_lexical_queue(sentence: Sentence) -> List[LexicalQueueEntry]:
    """Words of a sentence in reading order, each phrase followed by its sub-words."""
    queue: List[LexicalQueueEntry] = []
    for word in sentence.words:
        queue.append(LexicalQueueEntry(word=word))
        if isinstance(word, Phrase):
            queue.extend(LexicalQueueEntry(word=sub, parent_phrase=word.text) for sub in word.sub_words)
    return queue


def flatten(sentences: Iterable[Sentence]) -> List[VocabularyCandidate]:
    """Flatten sentences into vocabulary candidates.

    Punctuation is dropped. Every word and phrase yields one candidate, and a
    phrase's sub-words follow it directly. All candidates carry the original
    text of their sentence as context.
    """
    candidates: List[VocabularyCandidate] = []
    for sentence in sentences:
        candidates.extend(
            _candidate(entry.word, sentence.original) for entry in build_lexical_queue(sentence)
        )
    return candidates
