# Providers package
"""External service providers for the standup reporting system."""

from .llm_providers import GroqLLM, create_llm, describe_status

__all__ = ["GroqLLM", "create_llm", "describe_status"]
