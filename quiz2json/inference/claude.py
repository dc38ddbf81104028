"""ClaudeInferenceClient — Anthropic Claude backend.

Claude has no JSON response mode; the schema is offered as the input schema
of a single forced tool and the tool input is returned as JSON text.
"""
import json

from anthropic import AnthropicError, AsyncAnthropic

from quiz2json.constants import CLAUDE_MAX_TOKENS, CLAUDE_TOOL_NAME
from quiz2json.errors import TransportError
from quiz2json.inference.client import InferenceClient
from quiz2json.models import EncodedImage
from quiz2json.prompt import PromptSpec, to_json_schema


class ClaudeInferenceClient(InferenceClient):

    credential_env = "ANTHROPIC_API_KEY"

    async def _request(self, image: EncodedImage, prompt: PromptSpec) -> str | None:
        client = AsyncAnthropic(api_key=self._api_key)
        try:
            message = await client.messages.create(
                model=self._model,
                max_tokens=CLAUDE_MAX_TOKENS,
                tools=[
                    {
                        "name": CLAUDE_TOOL_NAME,
                        "description": "Record the questions extracted from the image.",
                        "input_schema": to_json_schema(prompt.response_schema),
                    }
                ],
                tool_choice={"type": "tool", "name": CLAUDE_TOOL_NAME},
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": image.mime_type,
                                    "data": image.data,
                                },
                            },
                            {"type": "text", "text": prompt.instruction_text},
                        ],
                    }
                ],
            )
        except AnthropicError as exc:
            raise TransportError(f"Claude request failed: {exc}") from exc

        tool_inputs = [
            block.input
            for block in message.content
            if block.type == "tool_use" and block.name == CLAUDE_TOOL_NAME
        ]
        match tool_inputs:
            case []:
                return None
            case [payload, *_]:
                return json.dumps(payload, ensure_ascii=False)
