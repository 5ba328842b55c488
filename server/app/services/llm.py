import logging
from typing import Any, Optional

from app.core.config import settings
from app.core.errors import ClientInputError, ConfigurationError, UpstreamError
from app.services.http_client import post_with_retry

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-goog-api-key"

REFUSAL_MESSAGE = (
    "My purpose is strictly limited to the Rigveda. "
    "Please ask me a question about the Vedic text."
)

SYSTEM_PROMPT = f"""You are a knowledgeable and dedicated Vedic scholar and expert on the Rigveda.
Your primary and sole function is to provide detailed and accurate answers about the Rigveda, its Mandalas, Hymns, Deities (like Indra, Agni, Soma, Ushas, etc.), Vedic philosophy, and related historical context.
You MUST NOT answer questions on any other topic, including modern events, politics, science, other religious texts, or general knowledge.
If a user asks a non-Rigveda question, politely state: "{REFUSAL_MESSAGE}\""""


def build_payload(prompt: str) -> dict:
    """Gemini generateContent body with the persona and search grounding."""
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "tools": [{"google_search": {}}],
        "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
    }


def _first_dict(items: Any) -> Optional[dict]:
    if not isinstance(items, list) or not items or not isinstance(items[0], dict):
        return None
    return items[0]


def first_candidate(result: Any) -> Optional[dict]:
    if not isinstance(result, dict):
        return None
    return _first_dict(result.get("candidates"))


def extract_text(result: Any) -> Optional[str]:
    """Text of the first part of the first candidate, if any."""
    candidate = first_candidate(result)
    if candidate is None:
        return None
    content = candidate.get("content")
    if not isinstance(content, dict):
        return None
    part = _first_dict(content.get("parts"))
    if part is None:
        return None
    text = part.get("text")
    if not isinstance(text, str) or not text:
        return None
    return text


def extract_sources(candidate: dict) -> list[dict]:
    """
    Citation sources from the candidate's grounding metadata.

    Reads ``groundingAttributions`` and falls back to ``groundingChunks``;
    entries lacking either a uri or a title are dropped.
    """
    metadata = candidate.get("groundingMetadata")
    if not isinstance(metadata, dict):
        return []
    entries = metadata.get("groundingAttributions") or metadata.get("groundingChunks")
    if not isinstance(entries, list):
        return []

    sources = []
    for entry in entries:
        web = entry.get("web") if isinstance(entry, dict) else None
        if not isinstance(web, dict):
            continue
        uri, title = web.get("uri"), web.get("title")
        if isinstance(uri, str) and uri and isinstance(title, str) and title:
            sources.append({"uri": uri, "title": title})
    return sources


class ChatGateway:
    """Forwards prompts to Gemini under the Rigveda scholar persona."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        caller=post_with_retry,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.api_url = api_url or settings.gemini_url
        self.caller = caller
        self.max_attempts = max_attempts or settings.RETRY_MAX_ATTEMPTS
        self.base_delay = (
            settings.RETRY_BASE_DELAY_SECONDS if base_delay is None else base_delay
        )
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def ask(self, prompt: Any) -> dict:
        """
        Ask the model a question.

        Returns:
            ``{"response": text, "sources": [{"uri", "title"}, ...]}``

        Raises:
            ConfigurationError: no API key is configured
            ClientInputError: the prompt is missing or blank
            UpstreamError: the call failed or the answer was unusable
        """
        if not self.configured:
            raise ConfigurationError("Server configuration error: API key is missing.")

        if not isinstance(prompt, str) or not prompt.strip():
            raise ClientInputError("Prompt is required.")

        try:
            result = await self.caller(
                self.api_url,
                build_payload(prompt),
                self.max_attempts,
                base_delay=self.base_delay,
                timeout=self.timeout,
                headers={API_KEY_HEADER: self.api_key},
            )
        except Exception as e:
            logger.error("Gemini API call failed: %s", e)
            raise UpstreamError(
                "We encountered an issue communicating with the AI. Please try again later.",
                details=str(e),
            ) from e

        text = extract_text(result)
        if text is None:
            logger.error("Gemini returned no usable candidate")
            raise UpstreamError("The AI model did not return a valid response.")

        return {"response": text, "sources": extract_sources(first_candidate(result))}
