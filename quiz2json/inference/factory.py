"""Builds the InferenceClient for the configured provider."""
from quiz2json.config import Config, Credential
from quiz2json.constants import PROVIDER_CLAUDE, PROVIDER_GEMINI, PROVIDER_OPENAI
from quiz2json.inference.claude import ClaudeInferenceClient
from quiz2json.inference.client import InferenceClient
from quiz2json.inference.gemini import GeminiInferenceClient
from quiz2json.inference.openai import OpenAIInferenceClient

BACKENDS: dict[str, type[InferenceClient]] = {
    PROVIDER_GEMINI: GeminiInferenceClient,
    PROVIDER_OPENAI: OpenAIInferenceClient,
    PROVIDER_CLAUDE: ClaudeInferenceClient,
}


def make_inference_client(config: Config, credential: Credential) -> InferenceClient:
    backend = BACKENDS[credential.provider]
    return backend(credential.api_key, credential.model, timeout=config.request_timeout)
