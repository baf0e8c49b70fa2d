"""Concrete implementation of the InferenceModel interface for a local Ollama server.

Translates prompts into `/api/generate` requests (non-streaming) and decodes
the JSON reply into a ModelResponse. httpx errors are mapped onto the domain
error hierarchy so callers never depend on the HTTP library.
"""

import logging
import time
from typing import Any, List, Optional

import httpx

from codefixer.domain.errors import (
    InferenceRequestError,
    InferenceResponseError,
    InferenceTimeoutError,
)
from codefixer.domain.interfaces.ai_model import InferenceModel
from codefixer.domain.models.analysis import ModelResponse
from codefixer.domain.models.common import ModelName, PromptText

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:11434/api/generate"
DEFAULT_MODEL = ModelName("codellama")
DEFAULT_TIMEOUT_MINUTES = 30.0
TAGS_PATH = "/api/tags"


class OllamaClient(InferenceModel):
    """Ollama implementation of the InferenceModel interface.

    Usage::

        async with OllamaClient(model="codellama") as client:
            reply = await client.generate(PromptText("..."))
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout_minutes: float = DEFAULT_TIMEOUT_MINUTES,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initializes the Ollama client.

        Args:
            model: The model identifier sent with every request.
            api_url: Full URL of the generate endpoint.
            timeout_minutes: Timeout applied to each request.
            http_client: Pre-built client, e.g. one using a mock transport.
        """
        self._model = ModelName(model)
        self.api_url = api_url
        self.timeout_minutes = timeout_minutes
        self._client = http_client
        logger.debug(f"OllamaClient initialized for model '{self._model}' at {self.api_url}")

    @property
    def model(self) -> ModelName:
        return self._model

    @property
    def client(self) -> httpx.AsyncClient:
        """The HTTP client, created on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_minutes * 60))
        return self._client

    @property
    def tags_url(self) -> str:
        return str(httpx.URL(self.api_url).copy_with(path=TAGS_PATH))

    async def generate(self, prompt: PromptText) -> ModelResponse:
        """Sends one generation request and decodes the reply."""
        payload = {"model": self._model, "prompt": prompt, "stream": False}
        logger.debug(f"Sending {len(prompt)} character prompt to {self.api_url}")
        start_time = time.perf_counter()

        response = await self._send("POST", self.api_url, json=payload)
        latency_ms = (time.perf_counter() - start_time) * 1000

        data = self._decode(response)
        value = data.get("response")
        if value is not None and not isinstance(value, str):
            raise InferenceResponseError(
                f"Field 'response' has type {type(value).__name__}, expected a string."
            )
        result = ModelResponse.from_dict(data)
        logger.debug(
            f"Received reply from {result.model or self._model} in {latency_ms:.2f}ms "
            f"({len(result.response or '')} chars)"
        )
        return result

    async def list_available_models(self) -> List[ModelName]:
        """Lists the models installed on the Ollama server."""
        response = await self._send("GET", self.tags_url)
        data = self._decode(response)
        models = data.get("models") or []
        names = [ModelName(entry["name"]) for entry in models if isinstance(entry, dict) and "name" in entry]
        logger.debug(f"Found {len(names)} models at {self.tags_url}")
        return names

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> "OllamaClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            logger.warning(f"Request to {url} timed out after {self.timeout_minutes} minutes")
            raise InferenceTimeoutError(f"Request to {url} timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"Inference endpoint returned HTTP {status}: {e.response.text[:200]}")
            raise InferenceRequestError(
                f"HTTP {status} from {url}", status_code=status
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"Request to {url} failed: {type(e).__name__} - {e}")
            raise InferenceRequestError(f"Request to {url} failed: {e}") from e

    @staticmethod
    def _decode(response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError as e:
            raise InferenceResponseError(f"Response body is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise InferenceResponseError(
                f"Expected a JSON object, got {type(data).__name__}."
            )
        return data
