"""Converter — encode → infer → format, one conversion at a time."""
import asyncio
import logging
import time
from enum import Enum

from quiz2json.constants import (
    ERR_IN_PROGRESS,
    ERR_UNEXPECTED,
    EXAMPLE_JSON,
    MSG_CONVERSION_FAILED,
    MSG_CONVERSION_OK,
    MSG_RAW_RESPONSE,
    MSG_STAGE,
    MSG_UNEXPECTED_FAILURE,
)
from quiz2json.errors import (
    ConversionError,
    ConversionInProgressError,
    MalformedResponseError,
    UnexpectedError,
)
from quiz2json.formatter import format_response
from quiz2json.image_encoder import ImageSource, encode
from quiz2json.inference.client import InferenceClient
from quiz2json.prompt import PROMPT_SPEC, PromptSpec

logger = logging.getLogger(__name__)


class ConversionState(Enum):
    IDLE = "idle"
    ENCODING = "encoding"
    REQUESTING = "requesting"
    FORMATTING = "formatting"
    DONE = "done"
    FAILED = "failed"


_IN_FLIGHT = (ConversionState.ENCODING, ConversionState.REQUESTING, ConversionState.FORMATTING)


class Converter:
    """Runs conversions for one display surface and remembers the last good result.

    Errors from every stage propagate unchanged; a failure never clears a
    previous successful result.
    """

    def __init__(
        self,
        client: InferenceClient,
        prompt: PromptSpec = PROMPT_SPEC,
        strict: bool = False,
    ) -> None:
        self._client = client
        self._prompt = prompt
        self._strict = strict
        self.state = ConversionState.IDLE
        self.failure: ConversionError | None = None
        self.last_result: str | None = None

    @property
    def busy(self) -> bool:
        return self.state in _IN_FLIGHT

    @property
    def has_result(self) -> bool:
        return self.last_result is not None

    def display_text(self) -> str:
        return self.last_result if self.last_result is not None else EXAMPLE_JSON

    async def convert(self, source: ImageSource, cancel: asyncio.Event | None = None) -> str:
        match self.busy:
            case True:
                raise ConversionInProgressError(ERR_IN_PROGRESS)
            case False:
                pass

        start = time.time()
        self.failure = None
        try:
            self._enter(ConversionState.ENCODING)
            image = await encode(source)

            self._enter(ConversionState.REQUESTING)
            raw_text = await self._client.infer(image, self._prompt, cancel)

            self._enter(ConversionState.FORMATTING)
            pretty = format_response(raw_text, strict=self._strict)
        except ConversionError as exc:
            self._fail(exc, time.time() - start)
            raise
        except Exception as exc:
            wrapped = UnexpectedError(ERR_UNEXPECTED % exc)
            self._fail(wrapped, time.time() - start)
            logger.exception(MSG_UNEXPECTED_FAILURE)
            raise wrapped from exc
        except BaseException:
            # CancelledError and interpreter exits: not a conversion outcome.
            self.state = ConversionState.IDLE
            raise

        self.last_result = pretty
        self._enter(ConversionState.DONE)
        logger.info(MSG_CONVERSION_OK, image.mime_type, time.time() - start)
        return pretty

    def _enter(self, state: ConversionState) -> None:
        self.state = state
        logger.debug(MSG_STAGE, state.value)

    def _fail(self, exc: ConversionError, elapsed: float) -> None:
        self.state = ConversionState.FAILED
        self.failure = exc
        logger.error(MSG_CONVERSION_FAILED, exc.kind, elapsed)
        match exc:
            case MalformedResponseError(raw_text=raw):
                logger.error(MSG_RAW_RESPONSE, raw)
            case _:
                pass
