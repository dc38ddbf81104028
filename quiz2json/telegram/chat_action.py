"""Chat action shown for the lifetime of one operation (conversion, upload)."""
import asyncio
import logging

from telegram import Bot
from telegram.constants import ChatAction

from quiz2json.bot_client import BusyIndicator
from quiz2json.constants import TELEGRAM_ACTION_INTERVAL

logger = logging.getLogger(__name__)


class TelegramChatAction(BusyIndicator):
    """Sends *action* right away, then refreshes it until stopped.

    TYPING while the model reads the image, UPLOAD_DOCUMENT while a long
    result goes out as questions.json.
    """

    def __init__(self, bot: Bot, chat_id: str, action: ChatAction = ChatAction.TYPING) -> None:
        self._bot = bot
        self._chat_id = int(chat_id)
        self._action = action
        self._task: asyncio.Task | None = None

    @property
    def action(self) -> ChatAction:
        return self._action

    async def _send(self) -> None:
        try:
            await self._bot.send_chat_action(chat_id=self._chat_id, action=self._action)
        except Exception as exc:
            logger.debug("Chat action %s failed: %s", self._action, exc)

    async def _refresh(self) -> None:
        while True:
            await asyncio.sleep(TELEGRAM_ACTION_INTERVAL)
            await self._send()

    async def start(self) -> None:
        await self.stop()
        # First action goes out before start() returns so it precedes any reply.
        await self._send()
        self._task = asyncio.create_task(self._refresh())

    async def stop(self) -> None:
        task, self._task = self._task, None
        match task:
            case None:
                return
            case _:
                task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
