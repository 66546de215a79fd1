import os
from typing import Any, Sequence

from google.genai import Client as GenAIClient
from google.genai import errors as genai_errors
from google.genai.types import HttpOptions

from .config import DEFAULT_CHAT_MODEL, ENV_CHAT_MODEL
from .errors import AnswerUnavailableError
from .storage import SearchResult

NO_RESULTS_ANSWER = "I couldn't find any relevant recipes to answer your question."
NO_ANSWER = "No answer found"

PROMPT_TEMPLATE = """You are a helpful professional chef. Use the following relevant recipes to answer the user's question. If the recipes aren't relevant to the question, you can say so.

Available Recipes:
{context}

Question: {question}

Please provide a helpful response based on these recipes and your general knowledge about cooking."""


def format_context(results: Sequence[SearchResult]) -> str:
    return "\n".join(
        f"- {result.label} (Similarity: {result.similarity:.2f})" for result in results
    )


class AnswerComposer:
    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_output_tokens: int = 500,
        client: Any | None = None,
    ):
        self.model = model or os.getenv(ENV_CHAT_MODEL, DEFAULT_CHAT_MODEL)
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        if client is not None:
            self._client = client
            return
        if api_key is None:
            api_key = os.getenv("GOOGLE_API_KEY")
        if api_key is None:
            raise ValueError(
                "GOOGLE_API_KEY not found within the current environment: please export it or provide it to the class constructor."
            )
        self._client = GenAIClient(
            api_key=api_key, http_options=HttpOptions(api_version="v1beta")
        )

    def build_prompt(self, question: str, results: Sequence[SearchResult]) -> str:
        return PROMPT_TEMPLATE.format(context=format_context(results), question=question)

    async def answer(self, question: str, results: Sequence[SearchResult]) -> str:
        if not results:
            return NO_RESULTS_ANSWER
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=self.build_prompt(question, results),
                config={
                    "temperature": self.temperature,
                    "max_output_tokens": self.max_output_tokens,
                },
            )
        except genai_errors.APIError as e:
            raise AnswerUnavailableError(f"Answer generation failed: {e}") from e
        return response.text or NO_ANSWER
