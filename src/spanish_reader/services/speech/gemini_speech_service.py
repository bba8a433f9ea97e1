"""Gemini Speech Service - Text-to-speech via Google Gemini API."""

from google.genai import types

from spanish_reader.services.gemini_client import generate_with_retries
from spanish_reader.services.speech.speech_service import SpeechResult, SpeechService


class GeminiSpeechService(SpeechService):
    """Speech synthesis using Gemini's TTS model with a prebuilt voice."""

    MODEL_NAME = "gemini-2.5-flash-preview-tts"
    VOICE_NAME = "Puck"
    SAMPLE_RATE = 24000

    async def synthesize(self, text: str, api_key: str) -> SpeechResult:
        if not text or not text.strip():
            return SpeechResult(audio=None, model=self.MODEL_NAME, error="Nothing to speak")

        response, error = await generate_with_retries(
            api_key=api_key,
            model=self.MODEL_NAME,
            contents=text,
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.VOICE_NAME),
                    ),
                ),
            ),
            action="Speech synthesis",
        )
        if error:
            return SpeechResult(audio=None, model=self.MODEL_NAME, error=error)

        try:
            audio = response.candidates[0].content.parts[0].inline_data.data
        except (AttributeError, IndexError, TypeError):
            audio = None
        if not audio:
            return SpeechResult(audio=None, model=self.MODEL_NAME, error="No audio data returned")
        return SpeechResult(audio=audio, model=self.MODEL_NAME, sample_rate=self.SAMPLE_RATE)
