"""Abstract interfaces for transport-agnostic bot clients."""
from abc import ABC, abstractmethod


class BusyIndicator(ABC):
    """Visible "working…" state while a conversion is in flight.

    Usable as ``async with indicator:`` so it is always stopped.
    """

    @abstractmethod
    async def start(self) -> None: ...

    @abstractmethod
    async def stop(self) -> None: ...

    async def __aenter__(self) -> "BusyIndicator":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()


class BotClient(ABC):
    @abstractmethod
    def run(self) -> None: ...

    @abstractmethod
    async def send_message(self, to: str, text: str, html: bool = False) -> bool: ...

    @abstractmethod
    async def send_document(self, to: str, content: bytes, filename: str) -> bool: ...
