"""Interface for the language-model inference endpoint.

Defines the contract for sending a single prompt to a locally hosted model
and listing the models it serves.
"""

import abc
from typing import List

from ..models.analysis import ModelResponse
from ..models.common import ModelName, PromptText


class InferenceModel(abc.ABC):
    """Abstract Base Class for inference endpoint interactions."""

    @property
    @abc.abstractmethod
    def model(self) -> ModelName:
        """The model identifier sent with every request."""
        pass

    @abc.abstractmethod
    async def generate(self, prompt: PromptText) -> ModelResponse:
        """Sends one non-streaming generation request.

        Args:
            prompt: The full prompt text.

        Returns:
            The decoded ModelResponse. `response` may be None.

        Raises:
            InferenceRequestError: On transport failures or a non-2xx status.
            InferenceTimeoutError: When the request exceeds the timeout.
            InferenceResponseError: When the body cannot be decoded.
        """
        pass

    @abc.abstractmethod
    async def list_available_models(self) -> List[ModelName]:
        """Lists the models available on the endpoint.

        Raises:
            InferenceError: If listing models fails.
        """
        pass

    async def close(self) -> None:
        """Releases any network resources held by the client."""
        pass
