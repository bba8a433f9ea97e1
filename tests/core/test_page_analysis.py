#!/usr/bin/env python3
"""
Tests for page analysis entities - token variants and JSON parsing.
"""

import pytest

from spanish_reader.core import (
    PageAnalysisResult,
    PersistedAnalysis,
    Phrase,
    Punctuation,
    Sentence,
    Word,
    WordCategory,
    token_from_dict,
)


def test_token_without_type_is_a_word():
    token = token_from_dict({"word": "casa", "translation": "Haus", "category": "noun"})

    assert isinstance(token, Word)
    assert not isinstance(token, Phrase)
    assert token.text == "casa"
    assert token.category is WordCategory.NOUN


def test_punctuation_token():
    token = token_from_dict({"word": ",", "type": "punctuation"})

    assert token == Punctuation(text=",")


def test_token_with_sub_words_becomes_phrase():
    token = token_from_dict(
        {
            "word": "se levanta",
            "type": "word",
            "category": "verb",
            "baseForm": "levantarse",
            "subWords": [
                {"word": "se", "type": "word", "category": "function"},
                {"word": " ", "type": "punctuation"},
                {"word": "levanta", "type": "word", "category": "verb"},
            ],
        }
    )

    assert isinstance(token, Phrase)
    assert token.base_form == "levantarse"
    assert [sub.text for sub in token.sub_words] == ["se", "levanta"]


def test_empty_sub_words_yield_plain_word():
    token = token_from_dict({"word": "y", "subWords": []})

    assert type(token) is Word


def test_unknown_category_is_dropped():
    token = token_from_dict({"word": "¡Ay!", "category": "interjection"})

    assert token.category is None


def test_phrase_requires_sub_words():
    with pytest.raises(ValueError, match="at least one sub-word"):
        Phrase(text="se va")


def test_phrase_rejects_nested_phrase():
    inner = Phrase(text="se va", sub_words=(Word(text="se"), Word(text="va")))

    with pytest.raises(ValueError, match="nested"):
        Phrase(text="ya se va", sub_words=(Word(text="ya"), inner))


def test_sentence_words_skip_punctuation_and_keep_order():
    sentence = Sentence.from_dict(
        {
            "original": "Hola, amigo.",
            "translation": "Hallo, Freund.",
            "words": [
                {"word": "Hola"},
                {"word": ",", "type": "punctuation"},
                {"word": " ", "type": "punctuation"},
                {"word": "amigo"},
                {"word": ".", "type": "punctuation"},
            ],
        }
    )

    assert [w.text for w in sentence.words] == ["Hola", "amigo"]
    assert sentence.reconstructed_text() == "Hola, amigo."


def test_analysis_survives_serialization():
    data = {
        "sentences": [
            {
                "original": "Me voy.",
                "translation": "Ich gehe.",
                "words": [
                    {
                        "word": "Me voy",
                        "type": "word",
                        "category": "verb",
                        "subWords": [{"word": "Me"}, {"word": "voy"}],
                    },
                    {"word": ".", "type": "punctuation"},
                ],
            }
        ]
    }
    analysis = PageAnalysisResult.from_dict(data)

    assert PageAnalysisResult.from_dict(analysis.to_dict()) == analysis


def test_persisted_analysis_keys():
    entry = PersistedAnalysis(analysis=PageAnalysisResult(), image="abc", timestamp=42)

    assert entry.to_dict() == {"data": {"sentences": []}, "image": "abc", "timestamp": 42}
