"""
Fireworks AI client for LLM inference and embeddings.
Provides wrapper around the Fireworks API with retry logic.
"""

from functools import lru_cache
from typing import List, Optional
from tenacity import retry, stop_after_attempt, wait_exponential

from fireworks.client import Fireworks

from carrierllm.config import get_settings


class FireworksClient:
    """
    Wrapper for Fireworks AI API used for carrier analysis and embeddings.
    """

    def __init__(self, client: Optional[Fireworks] = None):
        """Initialize the Fireworks client with API key."""
        settings = get_settings()

        self.client = client or Fireworks(api_key=settings.fireworks_api_key)
        self.llm_model = settings.fireworks_llm_model
        self.embedding_model = settings.fireworks_embedding_model

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 1000,
    ) -> str:
        """
        Generate text using the LLM.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (lower = more deterministic)
            max_tokens: Maximum tokens to generate

        Returns:
            Generated text response (may be empty)
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = self.client.chat.completions.create(
            model=self.llm_model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        return response.choices[0].message.content or ""

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def generate_embeddings(
        self,
        texts: List[str],
        prefix: str = ""
    ) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of texts to embed
            prefix: Optional task prefix added to each text

        Returns:
            List of embedding vectors
        """
        if prefix:
            texts = [f"{prefix}{text}" for text in texts]

        response = self.client.embeddings.create(
            model=self.embedding_model,
            input=texts,
        )

        return [item.embedding for item in response.data]

    def generate_embedding(self, text: str, prefix: str = "") -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Text to embed
            prefix: Optional task prefix

        Returns:
            Embedding vector (empty if the service returned nothing)
        """
        embeddings = self.generate_embeddings([text], prefix)
        return embeddings[0] if embeddings else []


@lru_cache()
def get_fireworks_client() -> FireworksClient:
    """Get cached Fireworks client instance."""
    return FireworksClient()
