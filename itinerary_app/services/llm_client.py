"""
LLM Client - Completion providers used for extraction.
Supports Anthropic (preferred) and OpenAI, text and vision.
"""
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from typing import Optional
import anthropic
import json
import logging
import openai
import re

from ..config import Settings, settings as default_settings
from .errors import (
    ConfigurationError,
    ExtractionError,
    InvalidJSONObject,
    NoJSONObjectFound,
)

logger = logging.getLogger(__name__)

CONFIGURATION_MESSAGE = (
    "No AI API key configured. Please set ANTHROPIC_API_KEY or "
    "OPENAI_API_KEY in environment variables."
)

DATA_URI_PATTERN = re.compile(r"^data:(.+?);base64,(.+)$", re.DOTALL)


class ImageInput:
    """An image carried as a base64 data URI."""

    def __init__(self, media_type: str, data: str):
        self.media_type = media_type
        self.data = data

    @property
    def data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"

    @classmethod
    def from_data_uri(cls, uri: str) -> "ImageInput":
        match = DATA_URI_PATTERN.match(uri or "")
        if not match:
            raise ExtractionError("Invalid image data format")
        return cls(media_type=match.group(1), data=match.group(2))


class AnthropicProvider:
    """Anthropic Messages API."""

    name = "anthropic"

    def __init__(self, config: Settings, client: Optional[AsyncAnthropic] = None):
        self.model = config.anthropic_model
        self.max_tokens = config.llm_max_tokens
        self.client = client or AsyncAnthropic(
            api_key=config.anthropic_api_key,
            timeout=config.http_timeout,
        )

    async def complete(self, prompt: str, image: Optional[ImageInput] = None) -> str:
        """Send one user turn (optionally with an image) and return the text."""
        if image is None:
            content = prompt
        else:
            content = [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": image.media_type,
                        "data": image.data,
                    },
                },
                {"type": "text", "text": prompt},
            ]

        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": content}],
            )
            return message.content[0].text
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise ExtractionError("Anthropic API request failed") from e
        except (IndexError, AttributeError) as e:
            logger.error(f"Unexpected Anthropic response: {e}")
            raise ExtractionError("Anthropic API returned no text") from e


class OpenAIProvider:
    """OpenAI Chat Completions API."""

    name = "openai"

    def __init__(self, config: Settings, client: Optional[AsyncOpenAI] = None):
        self.text_model = config.openai_text_model
        self.vision_model = config.openai_vision_model
        self.max_tokens = config.llm_max_tokens
        self.client = client or AsyncOpenAI(
            api_key=config.openai_api_key,
            timeout=config.http_timeout,
        )

    async def complete(self, prompt: str, image: Optional[ImageInput] = None) -> str:
        """Send one user turn (optionally with an image) and return the text."""
        if image is None:
            model = self.text_model
            content = prompt
        else:
            model = self.vision_model
            content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image.data_uri}},
            ]

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": content}],
                max_tokens=self.max_tokens,
            )
            return response.choices[0].message.content or ""
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise ExtractionError("OpenAI API request failed") from e
        except (IndexError, AttributeError) as e:
            logger.error(f"Unexpected OpenAI response: {e}")
            raise ExtractionError("OpenAI API returned no text") from e


def get_completion_provider(config: Optional[Settings] = None):
    """
    Pick the provider for a request.

    Anthropic is used whenever its key is set, OpenAI otherwise. Without
    either key this raises ConfigurationError.
    """
    config = config or default_settings
    if config.anthropic_api_key:
        return AnthropicProvider(config)
    if config.openai_api_key:
        return OpenAIProvider(config)
    raise ConfigurationError(CONFIGURATION_MESSAGE)


def find_json_object(text: str) -> dict:
    """
    Parse the first JSON object embedded in free text.

    Prose before the object and anything after it are ignored. Raises
    NoJSONObjectFound when the text has no ``{``, InvalidJSONObject when
    what follows it is not a JSON object.
    """
    start = (text or "").find("{")
    if start == -1:
        raise NoJSONObjectFound("No JSON object in response")

    try:
        value, _ = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError as e:
        raise InvalidJSONObject(f"Malformed JSON object: {e}") from e
    return value


def parse_ai_response(text: str) -> dict:
    """Best-effort version of ``find_json_object``: failures give {}."""
    try:
        return find_json_object(text)
    except NoJSONObjectFound:
        logger.warning("AI response contained no JSON object")
    except InvalidJSONObject as e:
        logger.error(f"Failed to parse AI response: {e}")
    return {}
