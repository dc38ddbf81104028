"""TelegramClient — photo in, pretty JSON out, via python-telegram-bot."""
import html
import logging
import time
from typing import Callable, Optional

from telegram import Bot, Update
from telegram.ext import Application, CommandHandler, ContextTypes
from telegram.ext import MessageHandler as TGMessageHandler
from telegram.ext import filters
from telegram.constants import ChatAction, ParseMode

from quiz2json.bot_client import BotClient
from quiz2json.config import Config
from quiz2json.constants import (
    CMD_HELP,
    CMD_LAST,
    CMD_START,
    EXAMPLE_JSON,
    FALLBACK_MIME_TYPE,
    MSG_BLOCKED_CHAT,
    MSG_BUSY,
    MSG_CONVERSION_FAILED_USER,
    MSG_HELP,
    MSG_NOT_AN_IMAGE,
    MSG_PLACEHOLDER_HEADER,
    MSG_SEND_FAIL,
    MSG_SEND_OK,
    RESULT_FILENAME,
    TELEGRAM_MESSAGE_LIMIT,
    TELEGRAM_PHOTO_MIME_TYPE,
)
from quiz2json.errors import ConversionInProgressError
from quiz2json.pipeline import Converter
from quiz2json.telegram.chat_action import TelegramChatAction
from quiz2json.telegram.image import TelegramImage

logger = logging.getLogger(__name__)


def _pre(text: str) -> str:
    return f'<pre><code class="language-json">{html.escape(text)}</code></pre>'


class TelegramClient(BotClient):

    def __init__(self, config: Config, converter_factory: Callable[[], Converter]) -> None:
        self._token = config.telegram_bot_token
        self._allowed_chat_id = config.allowed_chat_id
        self._app: Optional[Application] = None
        self._converter_factory = converter_factory
        self._converters: dict[str, Converter] = {}

    # ── BotClient interface ───────────────────────────────────────────────────

    def run(self) -> None:
        # Concurrent updates so a second image reaches the busy guard instead of queueing.
        self._app = Application.builder().token(self._token).concurrent_updates(True).build()
        self._app.add_handler(CommandHandler((CMD_HELP, CMD_START), self._make_help_handler()))
        self._app.add_handler(CommandHandler(CMD_LAST, self._make_last_handler()))
        self._app.add_handler(
            TGMessageHandler(filters.PHOTO | filters.Document.ALL, self._make_image_handler())
        )
        self._app.add_handler(
            TGMessageHandler(filters.TEXT & ~filters.COMMAND, self._make_text_handler())
        )
        self._app.run_polling()

    async def send_message(self, to: str, text: str, html: bool = False) -> bool:
        match self._app:
            case None:
                logger.error("send_message called before run()")
                return False
            case app:
                try:
                    await app.bot.send_message(
                        chat_id=int(to),
                        text=text,
                        parse_mode=ParseMode.HTML if html else None,
                    )
                    return True
                except Exception as exc:
                    logger.error("Telegram send_message failed: %s", exc)
                    return False

    async def send_document(self, to: str, content: bytes, filename: str) -> bool:
        match self._app:
            case None:
                logger.error("send_document called before run()")
                return False
            case app:
                try:
                    await app.bot.send_document(chat_id=int(to), document=content, filename=filename)
                    return True
                except Exception as exc:
                    logger.error("Telegram send_document failed: %s", exc)
                    return False

    # ── helpers (also used in tests) ─────────────────────────────────────────

    def _is_allowed(self, update: Update) -> bool:
        if update.effective_chat is None:
            return False
        return str(update.effective_chat.id) == str(self._allowed_chat_id).strip()

    def _converter_for(self, sender: str) -> Converter:
        match self._converters.get(sender):
            case None:
                converter = self._converter_factory()
                self._converters[sender] = converter
                return converter
            case existing:
                return existing

    @staticmethod
    def _image_from_update(update: Update) -> Optional[TelegramImage]:
        """Largest photo size, or an attached document with its own MIME type."""
        msg = update.message
        if msg is None:
            return None
        match (msg.photo, msg.document):
            case ([*_, largest], _):
                return TelegramImage(largest, TELEGRAM_PHOTO_MIME_TYPE)
            case (_, doc) if doc is not None:
                return TelegramImage(doc, doc.mime_type or FALLBACK_MIME_TYPE)
            case _:
                return None

    async def _deliver(self, to: str, pretty: str, bot: Bot) -> bool:
        """Inline <pre> block, or a .json document when over the message limit."""
        text = _pre(pretty)
        match len(text) <= TELEGRAM_MESSAGE_LIMIT:
            case True:
                return await self.send_message(to, text, html=True)
            case False:
                async with TelegramChatAction(bot, to, ChatAction.UPLOAD_DOCUMENT):
                    return await self.send_document(to, pretty.encode("utf-8"), RESULT_FILENAME)

    # ── internal handler factory ──────────────────────────────────────────────

    def _make_help_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._is_allowed(update):
                case False:
                    return
                case True:
                    pass
            sender = str(update.effective_chat.id)
            await self.send_message(sender, html.escape(MSG_HELP) + _pre(EXAMPLE_JSON), html=True)

        return _handler

    def _make_last_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._is_allowed(update):
                case False:
                    return
                case True:
                    pass
            sender = str(update.effective_chat.id)
            converter = self._converter_for(sender)
            match converter.has_result:
                case True:
                    await self._deliver(sender, converter.display_text(), context.bot)
                case False:
                    await self.send_message(
                        sender,
                        html.escape(MSG_PLACEHOLDER_HEADER) + "\n" + _pre(converter.display_text()),
                        html=True,
                    )

        return _handler

    def _make_text_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._is_allowed(update):
                case False:
                    return
                case True:
                    pass
            await self.send_message(str(update.effective_chat.id), MSG_NOT_AN_IMAGE)

        return _handler

    def _make_image_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._is_allowed(update):
                case False:
                    chat_id = update.effective_chat.id if update.effective_chat else "?"
                    logger.warning(MSG_BLOCKED_CHAT, chat_id)
                    return
                case True:
                    pass

            sender = str(update.effective_chat.id)
            source = self._image_from_update(update)
            match source:
                case None:
                    await self.send_message(sender, MSG_NOT_AN_IMAGE)
                case image:
                    await self._convert(sender, image, context.bot)

        return _handler

    async def _convert(self, sender: str, image: TelegramImage, bot: Bot) -> None:
        converter = self._converter_for(sender)
        match converter.busy:
            case True:
                await self.send_message(sender, MSG_BUSY)
                return
            case False:
                pass

        start = time.time()
        try:
            async with TelegramChatAction(bot, sender, ChatAction.TYPING):
                pretty = await converter.convert(image)
        except ConversionInProgressError:
            await self.send_message(sender, MSG_BUSY)
            return
        except Exception:
            logger.exception("Image conversion failed")
            await self.send_message(sender, MSG_CONVERSION_FAILED_USER)
            return

        success = await self._deliver(sender, pretty, bot)
        elapsed = time.time() - start
        match success:
            case True:
                logger.info(MSG_SEND_OK, elapsed)
            case False:
                logger.error(MSG_SEND_FAIL, elapsed)
