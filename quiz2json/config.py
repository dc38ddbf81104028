from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from quiz2json.constants import (
    DEFAULT_CLAUDE_MODEL,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_PROVIDER,
    ERR_NO_CREDENTIAL,
    ERR_UNKNOWN_PROVIDER,
    PROVIDER_CLAUDE,
    PROVIDER_GEMINI,
    PROVIDER_OPENAI,
)
from quiz2json.errors import MissingCredentialError

PROVIDERS = (PROVIDER_GEMINI, PROVIDER_OPENAI, PROVIDER_CLAUDE)

# provider -> environment variable holding its key
CREDENTIAL_ENV = {
    PROVIDER_GEMINI: "GEMINI_API_KEY",
    PROVIDER_OPENAI: "OPENAI_API_KEY",
    PROVIDER_CLAUDE: "ANTHROPIC_API_KEY",
}


@dataclass(frozen=True)
class Credential:
    provider: str
    api_key: str
    model: str


@dataclass(frozen=True)
class Config:
    telegram_bot_token: Optional[str]
    allowed_chat_id: Optional[str]
    log_level: str
    provider: str
    gemini_api_key: Optional[str]
    openai_api_key: Optional[str]
    anthropic_api_key: Optional[str]
    gemini_model: str
    openai_model: str
    claude_model: str
    request_timeout: Optional[float]
    strict_schema: bool

    @classmethod
    def from_env(cls, *, bot: bool = True) -> "Config":
        """Load settings from the environment (and .env). `bot` requires the Telegram fields."""
        load_dotenv()

        token = os.getenv("TELEGRAM_BOT_TOKEN") or None
        chat_id = os.getenv("ALLOWED_CHAT_ID") or None
        log_level = os.getenv("LOG_LEVEL", "INFO")
        provider = os.getenv("INFERENCE_PROVIDER", DEFAULT_PROVIDER).strip().lower()
        gemini_api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        anthropic_api_key = os.getenv("ANTHROPIC_API_KEY") or None
        gemini_model = os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL
        openai_model = os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL
        claude_model = os.getenv("CLAUDE_MODEL") or DEFAULT_CLAUDE_MODEL
        raw_timeout = os.getenv("REQUEST_TIMEOUT", "")
        raw_strict = os.getenv("STRICT_SCHEMA", "false")

        return cls._validate(
            bot=bot,
            telegram_bot_token=token,
            allowed_chat_id=chat_id,
            log_level=log_level,
            provider=provider,
            gemini_api_key=gemini_api_key,
            openai_api_key=openai_api_key,
            anthropic_api_key=anthropic_api_key,
            gemini_model=gemini_model,
            openai_model=openai_model,
            claude_model=claude_model,
            request_timeout=_parse_timeout(raw_timeout),
            strict_schema=raw_strict.strip().lower() in ("1", "true", "yes", "on"),
        )

    @staticmethod
    def _validate(
        bot: bool,
        telegram_bot_token: Optional[str],
        allowed_chat_id: Optional[str],
        log_level: str,
        provider: str,
        gemini_api_key: Optional[str],
        openai_api_key: Optional[str],
        anthropic_api_key: Optional[str],
        gemini_model: str,
        openai_model: str,
        claude_model: str,
        request_timeout: Optional[float],
        strict_schema: bool,
    ) -> "Config":
        match (bot, telegram_bot_token):
            case (True, None | ""):
                raise ValueError("TELEGRAM_BOT_TOKEN must be set in .env")
            case _:
                pass

        match (bot, allowed_chat_id):
            case (True, None | ""):
                raise ValueError("ALLOWED_CHAT_ID must be set in .env")
            case _:
                pass

        match provider:
            case p if p in PROVIDERS:
                pass
            case _:
                raise ValueError(ERR_UNKNOWN_PROVIDER % ", ".join(PROVIDERS))

        return Config(
            telegram_bot_token=telegram_bot_token,
            allowed_chat_id=allowed_chat_id,
            log_level=log_level,
            provider=provider,
            gemini_api_key=gemini_api_key,
            openai_api_key=openai_api_key,
            anthropic_api_key=anthropic_api_key,
            gemini_model=gemini_model,
            openai_model=openai_model,
            claude_model=claude_model,
            request_timeout=request_timeout,
            strict_schema=strict_schema,
        )

    def credential(self) -> Credential:
        """The selected provider's key and model, or MissingCredentialError."""
        key, model = {
            PROVIDER_GEMINI: (self.gemini_api_key, self.gemini_model),
            PROVIDER_OPENAI: (self.openai_api_key, self.openai_model),
            PROVIDER_CLAUDE: (self.anthropic_api_key, self.claude_model),
        }[self.provider]
        match key:
            case None | "":
                raise MissingCredentialError(ERR_NO_CREDENTIAL % CREDENTIAL_ENV[self.provider])
            case api_key:
                return Credential(provider=self.provider, api_key=api_key, model=model)


def _parse_timeout(raw: str) -> Optional[float]:
    """Seconds; blank or 0 disables the timeout."""
    match raw.strip():
        case "":
            return None
        case value:
            seconds = float(value)
            return seconds if seconds > 0 else None
