import os
import pathlib
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env (if present)
# Try the project root first, then the current directory
PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent.parent
ENV_PATH = PROJECT_ROOT / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)
else:
    load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return str(os.getenv(name, default)).lower() not in ("0", "false", "no")


class Settings:
    """Runtime configuration read from the environment."""

    def __init__(self) -> None:
        # Vapi
        self.vapi_api_key: Optional[str] = os.getenv("VAPI_API_KEY")
        self.vapi_base_url: str = os.getenv("VAPI_BASE_URL", "https://api.vapi.ai").rstrip("/")
        self.vapi_phone_number_id: Optional[str] = os.getenv("VAPI_PHONE_NUMBER_ID")
        self.vapi_normal_assistant_id: str = os.getenv(
            "VAPI_NORMAL_ASSISTANT_ID", "a7651967-ea3c-495e-ab15-b5c2775ec736"
        )
        self.vapi_severance_assistant_id: str = os.getenv(
            "VAPI_SEVERANCE_ASSISTANT_ID", "a82442b3-01c0-44c6-aa48-9d84c05279d6"
        )
        self.default_phone_number: Optional[str] = os.getenv("DEFAULT_PHONE_NUMBER")

        # Supabase
        self.supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
        self.supabase_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        self.entry_table: str = os.getenv("SUPABASE_ENTRY_TABLE", "entry")

        # LLM (Groq first, then OpenAI)
        self.groq_api_key: Optional[str] = os.getenv("GROQ_API_KEY")
        self.groq_model: str = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
        self.openai_api_key: Optional[str] = os.getenv("OPENAI_API_KEY")
        self.openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.llm_max_tokens: int = int(os.getenv("LLM_MAX_TOKENS", "4000"))

        self.http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
        self.reuse_cleaned_narratives: bool = _env_bool("REUSE_CLEANED_NARRATIVES", "false")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def get_settings() -> Settings:
    return Settings()
