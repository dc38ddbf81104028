"""GeminiInferenceClient — Google Gemini backend via google-genai."""
import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from quiz2json.constants import RESPONSE_MIME_TYPE
from quiz2json.errors import TransportError
from quiz2json.inference.client import InferenceClient
from quiz2json.models import EncodedImage
from quiz2json.prompt import PromptSpec


class GeminiInferenceClient(InferenceClient):

    credential_env = "GEMINI_API_KEY"

    async def _request(self, image: EncodedImage, prompt: PromptSpec) -> str | None:
        client = genai.Client(api_key=self._api_key)
        image_part = types.Part.from_bytes(data=image.raw_bytes(), mime_type=image.mime_type)
        try:
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=[image_part, prompt.instruction_text],
                config=types.GenerateContentConfig(
                    response_mime_type=RESPONSE_MIME_TYPE,
                    response_schema=prompt.response_schema,
                ),
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise TransportError(f"Gemini request failed: {exc}") from exc
        return response.text
