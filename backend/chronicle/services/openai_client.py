import logging
from typing import Optional

from openai import AsyncOpenAI, APIConnectionError, APITimeoutError, OpenAIError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import Settings, get_settings
from ..errors import GenerationError

logger = logging.getLogger(__name__)


JOURNAL_INSTRUCTION = "Turn this call transcript into a journal entry."


class OpenAIClient:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        # Try Groq first (free), fallback to OpenAI
        groq_key = self.settings.groq_api_key
        openai_key = self.settings.openai_api_key

        if groq_key and len(groq_key.strip()) > 0:
            self.client = AsyncOpenAI(
                api_key=groq_key,
                base_url="https://api.groq.com/openai/v1",
                timeout=self.settings.http_timeout_seconds,
            )
            self.model = self.settings.groq_model
            self.simulated = False
            logger.info("OpenAIClient: using Groq")
        elif openai_key and len(openai_key.strip()) > 0:
            self.client = AsyncOpenAI(api_key=openai_key, timeout=self.settings.http_timeout_seconds)
            self.model = self.settings.openai_model
            self.simulated = False
            logger.info("OpenAIClient: using OpenAI")
        else:
            self.client = None
            self.model = None
            self.simulated = True
            logger.info("OpenAIClient: using simulated responses (no API keys)")

    @retry(
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError)),
        wait=wait_exponential(min=1, max=10),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def _complete(self, transcript: str) -> str:
        chat = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": f"{JOURNAL_INSTRUCTION}\n\n{transcript}"}],
            max_tokens=self.settings.llm_max_tokens,
        )
        return chat.choices[0].message.content or ""

    async def clean_transcript(self, transcript: str) -> str:
        """Return the generated journal entry for a call transcript."""
        if self.simulated:
            # Collapse whitespace so the simulated entry still reads like prose
            return "Journal entry: " + " ".join(transcript.split())

        try:
            content = await self._complete(transcript)
        except OpenAIError as e:
            logger.error(f"LLM call failed: {type(e).__name__}: {str(e)}")
            raise GenerationError(f"Failed to clean transcript: {type(e).__name__}") from e
        if not content.strip():
            raise GenerationError("LLM returned an empty journal entry")
        return content
