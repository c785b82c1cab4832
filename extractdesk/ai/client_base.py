from abc import ABC, abstractmethod


class BaseAiClient(ABC):
    """Contract for provider-specific chat completion clients."""

    @abstractmethod
    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool,
    ) -> str:
        """Return the provider reply as plain text.

        Raises:
            AiNetworkError: on transport or provider API failures.
            AiResponseError: when the provider returns no content.
        """
