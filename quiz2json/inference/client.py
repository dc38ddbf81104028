"""InferenceClient — abstract base for image-to-JSON provider backends."""
import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable

from quiz2json.constants import ERR_CANCELLED, ERR_EMPTY_RESPONSE, ERR_NO_CREDENTIAL, ERR_TIMEOUT
from quiz2json.errors import (
    ConversionCancelledError,
    EmptyResponseError,
    MissingCredentialError,
    TransportError,
)
from quiz2json.models import EncodedImage
from quiz2json.prompt import PromptSpec

logger = logging.getLogger(__name__)


class InferenceClient(ABC):
    """One request per call, no retry. Subclasses implement `_request` only."""

    # Environment variable named in MissingCredentialError.
    credential_env: str = "API_KEY"

    def __init__(self, api_key: str | None, model: str, timeout: float | None = None) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout

    @property
    def model(self) -> str:
        return self._model

    async def infer(
        self,
        image: EncodedImage,
        prompt: PromptSpec,
        cancel: asyncio.Event | None = None,
    ) -> str:
        """Return the provider's raw JSON text, unverified.

        Raises MissingCredentialError before any network I/O when no key is
        configured, TransportError for provider or timeout failures,
        EmptyResponseError for a blank reply and ConversionCancelledError
        when *cancel* is set first.
        """
        match self._api_key:
            case None | "":
                raise MissingCredentialError(ERR_NO_CREDENTIAL % self.credential_env)
            case _:
                pass

        logger.debug("Requesting %s (%s)", self._model, image.mime_type)
        text = await _run_cancellable(self._request(image, prompt), cancel, self._timeout)
        match text.strip() if text else "":
            case "":
                raise EmptyResponseError(ERR_EMPTY_RESPONSE)
            case _:
                return text

    @abstractmethod
    async def _request(self, image: EncodedImage, prompt: PromptSpec) -> str | None:
        """Perform the provider call. Wraps SDK failures in TransportError."""
        ...


async def _run_cancellable(
    request: Awaitable[str | None],
    cancel: asyncio.Event | None,
    timeout: float | None,
) -> str | None:
    """Await *request*, abandoning it on *cancel*, on timeout or when the caller is cancelled."""
    task = asyncio.ensure_future(request)
    waiters = {task}
    cancel_waiter: asyncio.Task | None = None
    match cancel:
        case None:
            pass
        case event:
            cancel_waiter = asyncio.create_task(event.wait())
            waiters.add(cancel_waiter)

    try:
        done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        await _abandon(task)
        raise
    finally:
        match cancel_waiter:
            case None:
                pass
            case waiter:
                waiter.cancel()

    match task in done:
        case True:
            return task.result()
        case False:
            await _abandon(task)

    match cancel is not None and cancel.is_set():
        case True:
            raise ConversionCancelledError(ERR_CANCELLED)
        case False:
            raise TransportError(ERR_TIMEOUT % timeout)


async def _abandon(task: asyncio.Future) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as exc:
        logger.debug("Abandoned request finished with %s", exc)
