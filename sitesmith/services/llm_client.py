"""
LLM Client - Abstraction layer for LLM providers (OpenAI-compatible, Ollama)

Supports the OpenAI-compatible API (/v1/chat/completions) and Ollama native API (/api/chat).
The provider can be switched via LLM_PROVIDER environment variable.
"""
from typing import List, Dict, Optional
import httpx

from sitesmith.core.config import settings


class LLMClient:
    """
    Unified LLM client supporting multiple providers.

    Supported providers:
    - openai: OpenAI or any OpenAI-compatible server (/v1/chat/completions)
    - ollama: Local Ollama server using native API (/api/chat)
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = (api_base or settings.LLM_API_BASE).rstrip("/")
        self.model = model or settings.LLM_MODEL
        self.provider = provider or settings.LLM_PROVIDER
        self.api_key = api_key if api_key is not None else settings.LLM_API_KEY
        self.timeout = timeout or float(settings.LLM_TIMEOUT)
        self.max_tokens = max_tokens or settings.GENERATION_MAX_TOKENS
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        if self.api_key:
            return {"Authorization": f"Bearer {self.api_key}"}
        return {}

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or self.timeout,
            headers=self._headers(),
            transport=self.transport,
        )

    async def chat(
        self,
        messages: List[Dict],
        temperature: float = 0.1,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> Optional[str]:
        """
        Send chat completion request and return the response content.

        Args:
            messages: List of message dicts with 'role' and 'content' keys
            temperature: Sampling temperature (0.0 - 1.0)
            max_tokens: Maximum tokens to generate
            json_mode: Ask the provider for a JSON object response

        Returns:
            The assistant's response content (None if the provider sent none)

        Raises:
            httpx.HTTPError: Connection failure, timeout, or non-2xx status
            KeyError, IndexError, ValueError: Unexpected response envelope
        """
        # Use provided max_tokens or fall back to instance default
        tokens_limit = max_tokens or self.max_tokens

        async with self._client() as client:
            if self.provider == "ollama":
                # Ollama native API
                payload = {
                    "model": self.model,
                    "messages": messages,
                    "stream": False,
                    "options": {
                        "temperature": temperature,
                        "num_predict": tokens_limit,
                    },
                }
                if json_mode:
                    payload["format"] = "json"
                resp = await client.post(f"{self.api_base}/api/chat", json=payload)
                resp.raise_for_status()
                data = resp.json()
                return data["message"]["content"]
            else:
                # OpenAI-compatible API
                payload = {
                    "model": self.model,
                    "messages": messages,
                    "temperature": temperature,
                    "max_tokens": tokens_limit,
                }
                if json_mode:
                    payload["response_format"] = {"type": "json_object"}
                resp = await client.post(
                    f"{self.api_base}/v1/chat/completions", json=payload
                )
                resp.raise_for_status()
                data = resp.json()
                return data["choices"][0]["message"]["content"]

    async def health_check(self) -> Dict:
        """
        Check if the LLM server is reachable and responsive.

        Returns:
            Dict with 'status', 'provider', 'model', and optional 'error' keys
        """
        try:
            async with self._client(timeout=10.0) as client:
                if self.provider == "ollama":
                    # Ollama native API - check tags endpoint
                    resp = await client.get(f"{self.api_base}/api/tags")
                else:
                    # OpenAI-compatible API
                    resp = await client.get(f"{self.api_base}/v1/models")

                if resp.status_code == 200:
                    return {
                        "status": "healthy",
                        "provider": self.provider,
                        "model": self.model,
                        "api_base": self.api_base,
                    }
                else:
                    return {
                        "status": "unhealthy",
                        "provider": self.provider,
                        "model": self.model,
                        "error": f"HTTP {resp.status_code}",
                    }
        except httpx.HTTPError as e:
            return {
                "status": "unreachable",
                "provider": self.provider,
                "model": self.model,
                "api_base": self.api_base,
                "error": str(e),
            }


# Default client instance
_default_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get the default LLM client instance (singleton)."""
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client
