"""Generation provider adapters.

Two concrete implementations of ILLMProvider (ai_gateway/interfaces/llm_provider.py):
    - OpenAILLMProvider      : OpenAI chat completions in JSON mode
    - HttpGenerationProvider : the product's own generation endpoint over HTTP

main.py picks OpenAI when OPENAI_API_KEY is set and the HTTP endpoint otherwise.
"""

from ai_gateway.providers.llm.http_generation_provider import HttpGenerationProvider
from ai_gateway.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["HttpGenerationProvider", "OpenAILLMProvider"]
