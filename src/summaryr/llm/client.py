"""OpenAI access for chat completions and Whisper transcriptions.

Generators call `simple_chat` / `simple_json`; transcription goes through
`transcribe`. SDK exceptions are translated into the `LLMError` family so
callers never import from openai directly.
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog
from openai import APIConnectionError, APIStatusError, OpenAI, OpenAIError

from summaryr.config.app_config import AppConfig, load_app_config

logger = structlog.get_logger(__name__)

Role = Literal["system", "user", "assistant"]
TranscriptionFormat = Literal["text", "verbose_json"]

REPAIR_INSTRUCTIONS = """The previous reply was not valid JSON:
<<<
{invalid_output}
>>>

Send it again as valid JSON only. No explanations, no markdown fences."""

# Reasoning blocks some models prepend to their answer
REASONING_BLOCK = re.compile(
    r"<(think|analysis|reasoning)>.*?</\1>", re.DOTALL | re.IGNORECASE
)
FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class LLMError(Exception):
    """Base error for OpenAI calls."""


class LLMConfigurationError(LLMError):
    """No API key is configured."""


class LLMConnectionError(LLMError):
    """OpenAI could not be reached or timed out."""


class LLMResponseError(LLMError):
    """The reply was empty or not the JSON we asked for."""


@dataclass
class LLMConfig:
    base_url: str | None = None
    model: str = "gpt-4o-mini"
    transcription_model: str = "whisper-1"
    temperature: float = 0.7
    timeout: int = 120
    api_key: str | None = None

    @classmethod
    def from_app_config(cls, app_config: AppConfig | None = None) -> LLMConfig:
        settings = app_config or load_app_config()
        return cls(
            base_url=settings.llm.base_url,
            model=settings.llm.chat_model,
            transcription_model=settings.transcription.model,
            temperature=settings.llm.temperature,
            timeout=settings.llm.timeout,
            api_key=settings.llm.get_api_key(),
        )


@dataclass
class Message:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Text of a chat completion plus token usage and timing."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


def parse_json_payload(text: str) -> Any | None:
    """Best-effort JSON decoding of a model reply.

    Tries, in order: the whole reply, the first fenced block, the outermost
    object, the outermost array. Reasoning tags are removed first.

    Returns:
        The decoded value, or None when nothing parses
    """
    cleaned = REASONING_BLOCK.sub("", text).strip()

    candidates = [cleaned]
    fenced = FENCED_BLOCK.search(cleaned)
    if fenced:
        candidates.append(fenced.group(1).strip())
    for opener, closer in (("{", "}"), ("[", "]")):
        start, end = cleaned.find(opener), cleaned.rfind(closer)
        if 0 <= start < end:
            candidates.append(cleaned[start : end + 1])

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


def _usage_of(completion: Any) -> dict[str, int]:
    usage = getattr(completion, "usage", None)
    if not usage:
        return {}
    return {
        "prompt_tokens": usage.prompt_tokens,
        "completion_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
    }


def _as_dict(result: Any) -> dict[str, Any]:
    """Whisper returns a bare string for "text" and a model for "verbose_json"."""
    if isinstance(result, str):
        return {"text": result}
    if hasattr(result, "model_dump"):
        return result.model_dump()
    return dict(result)


class LLMClient:
    """Thin wrapper over the OpenAI SDK client."""

    def __init__(self, config: LLMConfig | None = None, model: str | None = None):
        """
        Args:
            config: Client settings (read from the app config if None)
            model: Chat model override

        Raises:
            LLMConfigurationError: If no API key is available
        """
        self.config = config or LLMConfig.from_app_config()
        if model is not None:
            self.config.model = model

        if not self.config.api_key:
            raise LLMConfigurationError("OPENAI_API_KEY environment variable is not set")

        self._client = OpenAI(
            api_key=self.config.api_key,
            base_url=self.config.base_url,
            timeout=self.config.timeout,
        )
        logger.info(
            "llm_client_initialized",
            model=self.config.model,
            transcription_model=self.config.transcription_model,
        )

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Run one chat completion.

        Raises:
            LLMConnectionError: Network failure or timeout
            LLMResponseError: No choices in the reply
            LLMError: Any other API error
        """
        request: dict[str, Any] = {
            "model": self.config.model,
            "messages": [message.to_dict() for message in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
        }
        if max_tokens is not None:
            request["max_tokens"] = max_tokens
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        started = time.monotonic()
        try:
            completion = self._client.chat.completions.create(**request)
        except APIConnectionError as e:
            raise LLMConnectionError(f"Could not reach OpenAI: {e}") from e
        except APIStatusError as e:
            raise LLMError(f"OpenAI returned {e.status_code}: {e.message}") from e
        except OpenAIError as e:
            raise LLMError(f"Chat completion failed: {e}") from e
        latency_ms = int((time.monotonic() - started) * 1000)

        if not completion.choices:
            raise LLMResponseError("No response from OpenAI")

        response = LLMResponse(
            content=completion.choices[0].message.content or "",
            model=completion.model,
            usage=_usage_of(completion),
            latency_ms=latency_ms,
        )
        logger.debug(
            "llm_response",
            model=response.model,
            tokens=response.total_tokens,
            latency_ms=latency_ms,
        )
        return response

    def chat_json(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int = 1,
    ) -> Any:
        """Chat in JSON mode and decode the reply.

        An undecodable reply is sent back with repair instructions up to
        max_retries times.

        Raises:
            LLMResponseError: If no attempt yields JSON
        """
        conversation = list(messages)
        first_reply = ""

        for attempt in range(max_retries + 1):
            reply = self.chat(
                conversation, temperature=temperature, max_tokens=max_tokens, json_mode=True
            ).content
            first_reply = first_reply or reply

            parsed = parse_json_payload(reply)
            if parsed is not None:
                if attempt:
                    logger.info("json_parse_recovered_after_retry", attempts=attempt + 1)
                return parsed

            logger.warning("json_parse_failed", attempt=attempt + 1, content=reply[:100])
            conversation = messages + [
                Message(role="user", content=REPAIR_INSTRUCTIONS.format(invalid_output=reply[:1000]))
            ]

        raise LLMResponseError(f"Invalid JSON response: {first_reply[:200]}...")

    def simple_chat(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """System + user prompt in, reply text out."""
        return self.chat(
            _single_turn(system_prompt, user_message),
            temperature=temperature,
            max_tokens=max_tokens,
        ).content

    def simple_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Any:
        """System + user prompt in, decoded JSON out."""
        return self.chat_json(
            _single_turn(system_prompt, user_message),
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def transcribe(
        self,
        audio: bytes,
        filename: str,
        mime_type: str,
        response_format: TranscriptionFormat = "verbose_json",
        prompt: str | None = None,
    ) -> dict[str, Any]:
        """Send audio to Whisper.

        The file name's extension tells Whisper the container format.

        Returns:
            {"text": ...}; verbose replies also hold "segments" and "duration"

        Raises:
            LLMError: If the API call fails
        """
        request: dict[str, Any] = {
            "model": self.config.transcription_model,
            "file": (filename, audio, mime_type),
            "response_format": response_format,
        }
        if prompt:
            request["prompt"] = prompt

        started = time.monotonic()
        try:
            result = self._client.audio.transcriptions.create(**request)
        except OpenAIError as e:
            raise LLMError(f"Whisper transcription failed: {e}") from e

        data = _as_dict(result)
        logger.debug(
            "whisper_response",
            filename=filename,
            size_bytes=len(audio),
            chars=len(data.get("text") or ""),
            latency_ms=int((time.monotonic() - started) * 1000),
        )
        return data


def _single_turn(system_prompt: str, user_message: str) -> list[Message]:
    return [
        Message(role="system", content=system_prompt),
        Message(role="user", content=user_message),
    ]


def get_llm_client() -> LLMClient:
    """Client built from the current application config."""
    return LLMClient(LLMConfig.from_app_config())
