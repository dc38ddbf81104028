"""All magic values live here — no inline literals anywhere else."""

# Telegram chat action re-send interval (seconds).
# A chat action expires after ~5 s, so we refresh every 4 s.
TELEGRAM_ACTION_INTERVAL: float = 4.0

# Telegram rejects text messages longer than this (characters).
TELEGRAM_MESSAGE_LIMIT = 4096
RESULT_FILENAME = "questions.json"

# Inference providers
PROVIDER_GEMINI = "gemini"
PROVIDER_OPENAI = "openai"
PROVIDER_CLAUDE = "claude"
DEFAULT_PROVIDER = PROVIDER_GEMINI

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5-20250929"
CLAUDE_MAX_TOKENS = 4096
CLAUDE_TOOL_NAME = "record_questions"
OPENAI_SCHEMA_NAME = "question_file"
RESPONSE_MIME_TYPE = "application/json"

# Image sources
TELEGRAM_PHOTO_MIME_TYPE = "image/jpeg"
FALLBACK_MIME_TYPE = "application/octet-stream"

# Formatting
JSON_INDENT = 2

# Log messages
MSG_BOT_STARTING = "Starting quiz2json bot…"
MSG_BLOCKED_CHAT = "Blocked update from chat_id: %s"
MSG_STAGE = "Conversion stage: %s"
MSG_CONVERSION_OK = "✓ Converted %s image (%.1fs)"
MSG_CONVERSION_FAILED = "✗ Conversion failed [%s] (%.1fs)"
MSG_RAW_RESPONSE = "Raw provider response: %r"
MSG_UNEXPECTED_FAILURE = "Unexpected exception inside the conversion pipeline"
MSG_SEND_OK = "✓ Sent (%.1fs)"
MSG_SEND_FAIL = "✗ Send failed (%.1fs)"
MSG_CREDENTIAL_MISSING = "No credential configured: %s"

# Exception messages (developer-facing)
ERR_NO_CREDENTIAL = "%s must be set in the environment or .env"
ERR_EMPTY_RESPONSE = "The provider returned no text"
ERR_MALFORMED_RESPONSE = "The provider returned text that is not valid JSON"
ERR_NON_JSON_CONSTANT = "%s is not a JSON value"
ERR_UNEXPECTED = "Unexpected failure: %r"
ERR_TIMEOUT = "Provider request timed out after %ss"
ERR_IN_PROGRESS = "A conversion is already in progress"
ERR_CANCELLED = "Conversion cancelled"
ERR_UNKNOWN_PROVIDER = "INFERENCE_PROVIDER must be one of: %s"

# User-facing messages (pt-BR, like the extraction prompt)
MSG_CONVERSION_FAILED_USER = "Falha ao converter a imagem. Tente novamente."
MSG_BUSY = "Ainda estou convertendo a imagem anterior. Aguarde o resultado."
MSG_NOT_AN_IMAGE = "Envie uma imagem (foto ou arquivo de imagem)."
MSG_PLACEHOLDER_HEADER = "Nenhum resultado ainda. Exemplo de saída:"

# Shown wherever a result is expected but none exists yet.
EXAMPLE_JSON = """{
  "questions": [
    {
      "id": "pergunta_da_semana",
      "statement": "Qual iniciativa devemos priorizar?",
      "options": [
        { "id": "A", "text": "Treinamentos" },
        { "id": "B", "text": "Infraestrutura" },
        { "id": "C", "text": "Suporte aos alunos" }
      ]
    }
  ]
}"""

CMD_HELP = "help"
CMD_START = "start"
CMD_LAST = "last"

MSG_HELP = (
    "quiz2json — transforme prints de perguntas em JSON\n"
    "\n"
    "Envie a foto de uma pergunta com alternativas e eu devolvo o JSON.\n"
    "\n"
    "Comandos:\n"
    "  /help  — mostra esta mensagem\n"
    "  /last  — reenvia o último resultado\n"
    "\n"
    "Formato:\n"
)
