"""
Model Backends - Adapters for the Anthropic, Google Gemini and OpenAI APIs

Every backend implements the same four operations (generate, stream_generate,
chat, stream_chat) and normalizes the native response into GenerationResult.

Client construction differs on purpose:
- ClaudeBackend and OpenAIBackend build their SDK client in __init__ and
  raise ConfigurationError right there if the credential is missing.
- GeminiBackend builds its client on first use, exactly once, and raises
  ConfigurationError only when a call is actually made.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Mapping
from contextlib import aclosing, contextmanager
from typing import Any

import anthropic
import httpx
import openai
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from switchboard.config.secrets import EnvSecretProvider, SecretProvider
from switchboard.config.settings import AgentBackendConfig, BackendsConfig
from switchboard.core.exceptions import ProviderError, StreamInterrupted, ValidationError
from switchboard.core.prompt_manager import PromptCategory, PromptManager
from switchboard.core.types import (
    AgentId,
    ChatMessage,
    GenerationResult,
    TokenUsage,
    coerce_messages,
    split_system_message,
)

logger = logging.getLogger(__name__)

MessagesInput = list[ChatMessage | Mapping[str, Any]]


class GenerationBackend(ABC):
    """Abstract base class for generation backends"""

    agent_id: str
    name: str
    provider: str

    # SDK exception types mapped onto ProviderError / StreamInterrupted
    api_errors: tuple[type[Exception], ...] = ()
    connection_errors: tuple[type[Exception], ...] = (httpx.TransportError,)

    def __init__(
        self,
        config: AgentBackendConfig,
        prompts: PromptManager | None = None,
        secrets: SecretProvider | None = None,
    ) -> None:
        self.config = config
        self.model = config.model
        self.prompts = prompts or PromptManager()
        self.secrets = secrets or EnvSecretProvider()

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    async def generate(self, prompt: str, context: str | None = None) -> GenerationResult:
        """Single-shot generation with the code-generation system prompt"""
        system = self.prompts.build_system_prompt(PromptCategory.CODE_GENERATION, context)
        with self._provider_errors("generate"):
            return await self._generate(prompt, system)

    def stream_generate(self, prompt: str, context: str | None = None) -> AsyncIterator[str]:
        """Stream text fragments for the same request as generate()"""
        system = self.prompts.build_system_prompt(PromptCategory.CODE_GENERATION, context)
        return self._deliver(self._stream_generate(prompt, system))

    async def chat(self, messages: MessagesInput) -> str:
        system, turns = self._prepare_chat(messages)
        with self._provider_errors("chat"):
            return await self._chat(system, turns)

    def stream_chat(self, messages: MessagesInput) -> AsyncIterator[str]:
        system, turns = self._prepare_chat(messages)
        return self._deliver(self._stream_chat(system, turns))

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying client"""
        pass

    # ------------------------------------------------------------------
    # Backend-specific hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _generate(self, prompt: str, system: str) -> GenerationResult:
        pass

    @abstractmethod
    def _stream_generate(self, prompt: str, system: str) -> AsyncGenerator[str, None]:
        pass

    @abstractmethod
    async def _chat(self, system: str | None, turns: list[ChatMessage]) -> str:
        pass

    @abstractmethod
    def _stream_chat(self, system: str | None, turns: list[ChatMessage]) -> AsyncGenerator[str, None]:
        pass

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _prepare_chat(messages: MessagesInput) -> tuple[str | None, list[ChatMessage]]:
        system, turns = split_system_message(coerce_messages(messages))
        if not turns:
            raise ValidationError("Chat requires at least one user or assistant message")
        return system, turns

    @staticmethod
    def _status_code(exc: Exception) -> int | None:
        return getattr(exc, "status_code", None)

    def _provider_error(self, exc: Exception, operation: str) -> ProviderError:
        logger.error("%s %s error: %s", self.name, operation, exc)
        return ProviderError(self.provider, str(exc), status_code=self._status_code(exc))

    @contextmanager
    def _provider_errors(self, operation: str):
        """Re-raise SDK failures as ProviderError, keeping the backend's message"""
        try:
            yield
        except self.connection_errors + self.api_errors as e:
            raise self._provider_error(e, operation) from e

    async def _deliver(self, fragments: AsyncGenerator[str, None]) -> AsyncGenerator[str, None]:
        """
        Pass fragments through in emission order.

        A connection failure after the first fragment is a StreamInterrupted;
        before it, the request itself failed. Closing this generator closes
        the backend stream.
        """
        started = False
        async with aclosing(fragments):
            try:
                async for fragment in fragments:
                    started = True
                    yield fragment
            except self.connection_errors as e:
                if started:
                    logger.warning("%s stream interrupted: %s", self.name, e)
                    raise StreamInterrupted(self.provider, str(e)) from e
                raise self._provider_error(e, "stream") from e
            except self.api_errors as e:
                raise self._provider_error(e, "stream") from e


class ClaudeBackend(GenerationBackend):
    """Anthropic Messages API backend"""

    agent_id = AgentId.CLAUDE.value
    name = "Claude"
    provider = "anthropic"
    api_errors = (anthropic.APIError,)
    connection_errors = (anthropic.APIConnectionError, httpx.TransportError)

    def __init__(
        self,
        config: AgentBackendConfig | None = None,
        prompts: PromptManager | None = None,
        secrets: SecretProvider | None = None,
        client: Any = None,
    ) -> None:
        super().__init__(config or BackendsConfig().claude, prompts, secrets)
        if client is None:
            client = anthropic.AsyncAnthropic(api_key=self.secrets.get_required(self.config.credential_env))
        self.client = client

    def _request(self, system: str | None, messages: list[dict[str, str]], max_tokens: int, temperature: float | None) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": messages,
        }
        if system:
            request["system"] = system
        if temperature is not None:
            request["temperature"] = temperature
        return request

    @staticmethod
    def _turns(turns: list[ChatMessage]) -> list[dict[str, str]]:
        return [{"role": m.role, "content": m.content} for m in turns]

    @staticmethod
    def _text(response: Any) -> str:
        return next((block.text for block in response.content if block.type == "text"), "")

    async def _events_text(self, request: dict[str, Any]) -> AsyncGenerator[str, None]:
        async with self.client.messages.stream(**request) as stream:
            async for event in stream:
                if event.type == "content_block_delta" and event.delta.type == "text_delta":
                    yield event.delta.text

    async def _generate(self, prompt: str, system: str) -> GenerationResult:
        request = self._request(
            system, [{"role": "user", "content": prompt}], self.config.max_tokens, self.config.temperature
        )
        logger.debug("Claude generate: model=%s max_tokens=%d", self.model, self.config.max_tokens)
        response = await self.client.messages.create(**request)
        usage = response.usage
        return GenerationResult(
            content=self._text(response),
            tokens=TokenUsage(input=usage.input_tokens or 0, output=usage.output_tokens or 0),
            model=response.model,
            finish_reason=response.stop_reason or "unknown",
        )

    def _stream_generate(self, prompt: str, system: str) -> AsyncGenerator[str, None]:
        return self._events_text(
            self._request(system, [{"role": "user", "content": prompt}], self.config.max_tokens, self.config.temperature)
        )

    async def _chat(self, system: str | None, turns: list[ChatMessage]) -> str:
        response = await self.client.messages.create(
            **self._request(system, self._turns(turns), self.config.chat_max_tokens, self.config.chat_temperature)
        )
        return self._text(response)

    def _stream_chat(self, system: str | None, turns: list[ChatMessage]) -> AsyncGenerator[str, None]:
        return self._events_text(
            self._request(system, self._turns(turns), self.config.chat_max_tokens, self.config.chat_temperature)
        )

    async def close(self) -> None:
        await self.client.close()


class GeminiBackend(GenerationBackend):
    """Google Gemini backend; the client is created on first use"""

    agent_id = AgentId.GEMINI.value
    name = "Gemini"
    provider = "google"
    api_errors = (genai_errors.APIError,)

    def __init__(
        self,
        config: AgentBackendConfig | None = None,
        prompts: PromptManager | None = None,
        secrets: SecretProvider | None = None,
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        super().__init__(config or BackendsConfig().gemini, prompts, secrets)
        self._client_factory = client_factory or (lambda api_key: genai.Client(api_key=api_key))
        self._client: Any = None
        self._client_lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    def _get_client(self) -> Any:
        """Get or create the Gemini client; concurrent first calls build one client"""
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    api_key = self.secrets.get_required(self.config.credential_env)
                    self._client = self._client_factory(api_key)
                    logger.info("Gemini client initialized (model=%s)", self.model)
        return self._client

    @staticmethod
    def _status_code(exc: Exception) -> int | None:
        return getattr(exc, "code", None)

    def _config(self, system: str | None, max_tokens: int, temperature: float | None) -> genai_types.GenerateContentConfig:
        return genai_types.GenerateContentConfig(
            system_instruction=system or None,
            max_output_tokens=max_tokens,
            temperature=temperature,
        )

    @staticmethod
    def _finish_reason(response: Any) -> str:
        candidates = response.candidates or []
        reason = candidates[0].finish_reason if candidates else None
        if reason is None:
            return "unknown"
        return str(getattr(reason, "value", reason))

    @staticmethod
    def _history(turns: list[ChatMessage]) -> list[genai_types.Content]:
        return [
            genai_types.Content(
                role="model" if m.role == "assistant" else "user",
                parts=[genai_types.Part(text=m.content)],
            )
            for m in turns
        ]

    def _start_chat(self, system: str | None, turns: list[ChatMessage]) -> Any:
        return self._get_client().aio.chats.create(
            model=self.model,
            config=self._config(system, self.config.chat_max_tokens, self.config.chat_temperature),
            history=self._history(turns[:-1]),
        )

    async def _generate(self, prompt: str, system: str) -> GenerationResult:
        client = self._get_client()
        logger.debug("Gemini generate: model=%s max_tokens=%d", self.model, self.config.max_tokens)
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self._config(system, self.config.max_tokens, self.config.temperature),
        )
        usage = response.usage_metadata
        return GenerationResult(
            content=response.text or "",
            tokens=TokenUsage(
                input=(usage.prompt_token_count or 0) if usage else 0,
                output=(usage.candidates_token_count or 0) if usage else 0,
            ),
            model=self.model,
            finish_reason=self._finish_reason(response),
        )

    async def _stream_generate(self, prompt: str, system: str) -> AsyncGenerator[str, None]:
        stream = await self._get_client().aio.models.generate_content_stream(
            model=self.model,
            contents=prompt,
            config=self._config(system, self.config.max_tokens, self.config.temperature),
        )
        async with aclosing(stream):
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text

    async def _chat(self, system: str | None, turns: list[ChatMessage]) -> str:
        chat = self._start_chat(system, turns)
        response = await chat.send_message(turns[-1].content)
        return response.text or ""

    async def _stream_chat(self, system: str | None, turns: list[ChatMessage]) -> AsyncGenerator[str, None]:
        chat = self._start_chat(system, turns)
        stream = await chat.send_message_stream(turns[-1].content)
        async with aclosing(stream):
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aio.aclose()
            self._client = None


class OpenAIBackend(GenerationBackend):
    """OpenAI Chat Completions backend"""

    agent_id = AgentId.OPENAI.value
    name = "OpenAI"
    provider = "openai"
    api_errors = (openai.APIError,)
    connection_errors = (openai.APIConnectionError, httpx.TransportError)

    def __init__(
        self,
        config: AgentBackendConfig | None = None,
        prompts: PromptManager | None = None,
        secrets: SecretProvider | None = None,
        client: Any = None,
    ) -> None:
        super().__init__(config or BackendsConfig().openai, prompts, secrets)
        if client is None:
            client = openai.AsyncOpenAI(api_key=self.secrets.get_required(self.config.credential_env))
        self.client = client

    @staticmethod
    def _messages(system: str | None, turns: list[ChatMessage]) -> list[dict[str, str]]:
        messages = [{"role": "system", "content": system}] if system else []
        messages.extend({"role": m.role, "content": m.content} for m in turns)
        return messages

    def _request(self, messages: list[dict[str, str]], max_tokens: int, temperature: float | None) -> dict[str, Any]:
        request: dict[str, Any] = {"model": self.model, "messages": messages, "max_tokens": max_tokens}
        if temperature is not None:
            request["temperature"] = temperature
        return request

    async def _chunks_text(self, request: dict[str, Any]) -> AsyncGenerator[str, None]:
        stream = await self.client.chat.completions.create(**request, stream=True)
        async with stream:
            async for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content

    def _generate_request(self, prompt: str, system: str) -> dict[str, Any]:
        return self._request(
            [{"role": "system", "content": system}, {"role": "user", "content": prompt}],
            self.config.max_tokens,
            self.config.temperature,
        )

    async def _generate(self, prompt: str, system: str) -> GenerationResult:
        logger.debug("OpenAI generate: model=%s max_tokens=%d", self.model, self.config.max_tokens)
        response = await self.client.chat.completions.create(**self._generate_request(prompt, system))
        choice = response.choices[0]
        usage = response.usage
        return GenerationResult(
            content=choice.message.content or "",
            tokens=TokenUsage(
                input=(usage.prompt_tokens or 0) if usage else 0,
                output=(usage.completion_tokens or 0) if usage else 0,
            ),
            model=response.model,
            finish_reason=choice.finish_reason or "unknown",
        )

    def _stream_generate(self, prompt: str, system: str) -> AsyncGenerator[str, None]:
        return self._chunks_text(self._generate_request(prompt, system))

    async def _chat(self, system: str | None, turns: list[ChatMessage]) -> str:
        response = await self.client.chat.completions.create(
            **self._request(self._messages(system, turns), self.config.chat_max_tokens, self.config.chat_temperature)
        )
        return response.choices[0].message.content or ""

    def _stream_chat(self, system: str | None, turns: list[ChatMessage]) -> AsyncGenerator[str, None]:
        return self._chunks_text(
            self._request(self._messages(system, turns), self.config.chat_max_tokens, self.config.chat_temperature)
        )

    async def close(self) -> None:
        await self.client.close()
