"""Gemini Page Analysis Service - Implements page analysis via Google Gemini API."""

import base64
import binascii
import json
import logging

from google.genai import types

from spanish_reader.core import PageAnalysisResult
from spanish_reader.services.analysis.analysis_service import (
    AnalysisResult,
    ExampleSentenceResult,
    PageAnalysisService,
)
from spanish_reader.services.gemini_client import generate_with_retries

logger = logging.getLogger(__name__)


def _string(description: str) -> types.Schema:
    return types.Schema(type=types.Type.STRING, description=description)


_TOKEN_PROPERTIES = {
    "word": _string("The word, phrase, punctuation, or space."),
    "type": types.Schema(
        type=types.Type.STRING,
        enum=["word", "punctuation"],
        description="Use 'word' for lexical units/phrases, 'punctuation' for symbols/spaces.",
    ),
    "translation": _string("German translation (required if type='word')."),
    "explanation": _string("German grammar/context explanation (required if type='word')."),
    "literalTranslation": _string("Word-for-word German translation."),
    "category": types.Schema(
        type=types.Type.STRING,
        enum=["noun", "verb", "adjective", "function"],
        description="Grammatical category.",
    ),
    "baseForm": _string("Lemma/Infinitiv."),
    "tense": _string("Tense of a verb, e.g. 'Präteritum'."),
    "person": _string("Person of a verb, e.g. '3. Pers. Sing.'."),
}

SUB_WORD_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties=_TOKEN_PROPERTIES,
    required=["word", "type"],
)

TOKEN_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        **_TOKEN_PROPERTIES,
        "subWords": types.Schema(
            type=types.Type.ARRAY,
            items=SUB_WORD_SCHEMA,
            description="Individual words if this item is a multi-word phrase.",
        ),
    },
    required=["word", "type"],
)

ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "sentences": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "original": _string("The EXACT verbatim sentence from the image. No omissions."),
                    "translation": _string("Natural German translation of the full sentence."),
                    "words": types.Schema(type=types.Type.ARRAY, items=TOKEN_SCHEMA),
                },
                required=["original", "translation", "words"],
            ),
        )
    },
    required=["sentences"],
)

EXAMPLE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "sentence": _string("A short Spanish example sentence."),
        "translation": _string("German translation of the sentence."),
    },
    required=["sentence", "translation"],
)


class GeminiPageAnalysisService(PageAnalysisService):
    """
    Page analysis using Google Gemini API.

    The model returns JSON constrained by ``ANALYSIS_SCHEMA``; multi-word
    units come back as one token with their words in ``subWords``.
    """

    MODEL_NAME = "gemini-3-pro-preview"
    EXAMPLE_MODEL_NAME = "gemini-2.5-flash"
    THINKING_BUDGET = 12000

    SYSTEM_INSTRUCTION = (
        "You are a professional Spanish-to-German translator and linguist. Your goal is to "
        "extract ALL sentences from an image and group related lexical units like reflexive "
        "verbs and compound phrases as single items for a vocabulary learner."
    )

    ANALYSIS_PROMPT = """Analyze the attached Spanish book page. You are an expert Spanish teacher.

CRITICAL INSTRUCTIONS:
1. COMPLETE TRANSCRIPTION: You MUST process EVERY SINGLE SENTENCE visible on the page. Do not skip the first or last sentences. Scan line by line.
2. PHRASE BINDING: Combine words that belong together into a SINGLE 'word' object and list its individual words in 'subWords':
   - Reflexive verbs: "se levantó", "me gusta", "irse".
   - Multi-word connectors: "tal vez", "por qué", "sin embargo", "a lo mejor", "de repente".
   - Idiomatic phrases: "tener que", "dar un paseo".
3. FULL CHARACTER COVERAGE: The 'words' array for each sentence must reconstruct the 'original' string perfectly (including spaces and punctuation).
4. DATA TYPES:
   - 'punctuation': symbols, marks, or standalone spaces.
   - 'word': actual words or combined phrases.
5. No placeholders. If you find text, you analyze it."""

    EXAMPLE_PROMPT = """Write one short, natural Spanish example sentence using the {category} "{word}".
Return the sentence and its German translation."""

    async def analyze_image(self, image_base64: str, api_key: str) -> AnalysisResult:
        try:
            image_bytes = base64.b64decode(image_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            return AnalysisResult(analysis=None, model=self.MODEL_NAME, error=f"Invalid image data: {exc}")

        response, error = await generate_with_retries(
            api_key=api_key,
            model=self.MODEL_NAME,
            contents=[
                types.Part.from_bytes(data=image_bytes, mime_type="image/jpeg"),
                self.ANALYSIS_PROMPT,
            ],
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=ANALYSIS_SCHEMA,
                system_instruction=self.SYSTEM_INSTRUCTION,
                thinking_config=types.ThinkingConfig(thinking_budget=self.THINKING_BUDGET),
            ),
            action="Analysis",
        )
        if error:
            return AnalysisResult(analysis=None, model=self.MODEL_NAME, error=error)
        if not response.text:
            return AnalysisResult(analysis=None, model=self.MODEL_NAME, error="Empty response from API")

        try:
            analysis = PageAnalysisResult.from_dict(json.loads(response.text))
        except (json.JSONDecodeError, ValueError, TypeError, AttributeError) as exc:
            logger.error("Could not parse analysis response: %s", exc)
            return AnalysisResult(analysis=None, model=self.MODEL_NAME, error=f"Malformed analysis: {exc}")

        logger.info("Analysis returned %d sentences", len(analysis.sentences))
        return AnalysisResult(analysis=analysis, model=self.MODEL_NAME)

    async def generate_example_sentence(
        self, word: str, category: str, api_key: str
    ) -> ExampleSentenceResult:
        response, error = await generate_with_retries(
            api_key=api_key,
            model=self.EXAMPLE_MODEL_NAME,
            contents=self.EXAMPLE_PROMPT.format(word=word, category=category or "Vokabel"),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=EXAMPLE_SCHEMA,
                temperature=0.7,
            ),
            action="Example sentence",
        )
        if error:
            return ExampleSentenceResult(None, None, self.EXAMPLE_MODEL_NAME, error=error)
        try:
            data = json.loads(response.text or "")
        except json.JSONDecodeError as exc:
            return ExampleSentenceResult(None, None, self.EXAMPLE_MODEL_NAME, error=f"Malformed response: {exc}")
        if not isinstance(data, dict):
            return ExampleSentenceResult(
                None, None, self.EXAMPLE_MODEL_NAME, error="Malformed response: expected a JSON object"
            )
        return ExampleSentenceResult(
            sentence=data.get("sentence"),
            translation=data.get("translation"),
            model=self.EXAMPLE_MODEL_NAME,
        )
