# interfaces.py
from abc import ABC, abstractmethod
from typing import Optional


class LLMInterface(ABC):
    """Abstract interface for text-generation backends.

    Implementations raise ``LLMProviderError`` carrying the HTTP status code
    of the failed call (``None`` when the request never got a response).
    """

    @abstractmethod
    async def complete(self, prompt: str, max_tokens: int, system_prompt: Optional[str] = None) -> str:
        pass
