from typing import Any, Dict, List, Optional

import dotenv
from litellm import acompletion
from loguru import logger

from release_metrics.context import render_context
from release_metrics.metrics.types import Summary

dotenv.load_dotenv()


class LLMClient:
    """Client for asking an LLM questions about a release."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        api_base_url: Optional[str] = None,
    ):
        """Initialize LLM client.

        Args:
            model: Model name (supports OpenAI, Anthropic, etc. via LiteLLM)
            temperature: Sampling temperature (0-1)
            api_base_url: Optional API base URL (e.g., "https://api.openai.com/v1").
                         If None, uses LiteLLM default based on model provider.
        """
        self.model = model
        self.temperature = temperature
        self.api_base_url = api_base_url

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "LLMClient":
        llm_config = config.get('llm', {})
        return cls(
            model=llm_config.get('model', 'gpt-4o-mini'),
            temperature=llm_config.get('temperature', 0.3),
            api_base_url=llm_config.get('api_base_url'),
        )

    def _completion_kwargs(self, messages: List[Dict[str, str]]) -> Dict[str, Any]:
        completion_kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if self.api_base_url:
            # OpenAI-compatible endpoints end with /v1
            is_openai_compatible = self.api_base_url.rstrip("/").endswith("/v1")

            model_name = self.model
            if is_openai_compatible:
                # LiteLLM needs a provider prefix even for custom OpenAI-compatible APIs
                if "/" not in model_name:
                    completion_kwargs["model"] = f"openai/{model_name}"
            else:
                if "/" in model_name:
                    model_name = model_name.split("/", 1)[1]
                if not model_name.startswith("custom/"):
                    completion_kwargs["model"] = f"custom/{model_name}"
            completion_kwargs["api_base"] = self.api_base_url.rstrip("/")
        return completion_kwargs

    async def completion(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Get text completion from LLM.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt

        Returns:
            Response text
        """
        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        try:
            response = await acompletion(**self._completion_kwargs(messages))
        except Exception as e:
            logger.error(f"LLM completion failed: {type(e).__name__}: {e}")
            raise

        return response.choices[0].message.content

    async def ask_about_release(self, summary: Summary, release: str, question: str) -> str:
        """Answer a question using the release context as the system prompt."""
        return await self.completion(question, system_prompt=render_context(summary, release))
