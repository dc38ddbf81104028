"""OpenAIInferenceClient — OpenAI backend using strict JSON-schema structured output."""
from openai import AsyncOpenAI, OpenAIError

from quiz2json.constants import OPENAI_SCHEMA_NAME
from quiz2json.errors import TransportError
from quiz2json.inference.client import InferenceClient
from quiz2json.models import EncodedImage
from quiz2json.prompt import PromptSpec, to_json_schema


class OpenAIInferenceClient(InferenceClient):

    credential_env = "OPENAI_API_KEY"

    async def _request(self, image: EncodedImage, prompt: PromptSpec) -> str | None:
        client = AsyncOpenAI(api_key=self._api_key)
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:{image.mime_type};base64,{image.data}"},
                            },
                            {"type": "text", "text": prompt.instruction_text},
                        ],
                    }
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": OPENAI_SCHEMA_NAME,
                        "strict": True,
                        "schema": to_json_schema(prompt.response_schema),
                    },
                },
            )
        except OpenAIError as exc:
            raise TransportError(f"OpenAI request failed: {exc}") from exc
        match response.choices:
            case []:
                return None
            case [first, *_]:
                return first.message.content
