# llm_providers.py
"""
Groq LLM provider for the standup reporting system using LangChain

Wraps ChatGroq behind LLMInterface and turns Groq SDK failures into
LLMProviderError carrying the HTTP status code.
"""

import logging
from typing import Optional

import groq
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import StrOutputParser
from langchain_core.utils.utils import convert_to_secret_str
from langchain_groq import ChatGroq

from standup_digest.core import LLMInterface, settings
from standup_digest.core.exceptions import LLMProviderError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant that creates professional project management "
    "reports based on team standup updates."
)


def describe_status(status_code: Optional[int]) -> str:
    """Human-readable cause for a failed provider call"""
    if status_code is None:
        return "Could not reach the AI service"
    if status_code == 401:
        return "AI service rejected the request as unauthorized. Check GROQ_API_KEY"
    if status_code == 403:
        return "AI service denied access. The API key may be invalid or lack permissions"
    if status_code == 404:
        return "AI service endpoint or model not found. Check GROQ_MODEL"
    if status_code == 429:
        return "AI service rate limit reached"
    if status_code == 529:
        return "AI service is overloaded"
    if status_code >= 500:
        return f"AI service server error ({status_code})"
    return f"AI service request failed with status {status_code}"


class LangChainLLMWrapper(LLMInterface):
    """Base wrapper for LangChain chat model implementations"""

    def __init__(self, llm):
        self.llm = llm
        self.output_parser = StrOutputParser()

    async def complete(self, prompt: str, max_tokens: int, system_prompt: Optional[str] = None) -> str:
        messages = [
            SystemMessage(content=system_prompt or DEFAULT_SYSTEM_PROMPT),
            HumanMessage(content=prompt),
        ]
        try:
            response = await self.llm.ainvoke(messages, max_tokens=max_tokens)
        except groq.APIStatusError as e:
            raise LLMProviderError(describe_status(e.status_code), status_code=e.status_code) from e
        except groq.APIConnectionError as e:
            raise LLMProviderError(describe_status(None)) from e
        except groq.APIError as e:
            raise LLMProviderError(f"AI service returned an unusable response: {e}") from e
        return self.output_parser.invoke(response)


class GroqLLM(LangChainLLMWrapper):
    """
    Groq API using LangChain - free tier available with very fast inference

    Setup:
    1. Sign up at https://console.groq.com/
    2. Get free API key
    3. Set environment variable: export GROQ_API_KEY=your_key
    """

    def __init__(self, api_key: str, model_name: str = settings.GROQ_MODEL, temperature: float = 0.7):
        # Retries are owned by the caller so the schedule stays observable
        llm = ChatGroq(
            model=model_name,
            temperature=temperature,
            api_key=convert_to_secret_str(api_key),
            max_retries=0,
        )
        super().__init__(llm)
        self.model_name = model_name


def create_llm(model_name: Optional[str] = None, api_key: Optional[str] = None) -> Optional[LLMInterface]:
    """
    Factory function to create a Groq LLM instance

    Returns None when no API key is configured; callers then run without AI.
    """
    api_key = api_key or settings.GROQ_API_KEY
    if not api_key:
        logger.warning("GROQ_API_KEY not set, AI summaries and drafts are disabled")
        return None

    model_name = model_name or settings.GROQ_MODEL
    logger.info(f"Using Groq model {model_name}")
    return GroqLLM(api_key=api_key, model_name=model_name)
