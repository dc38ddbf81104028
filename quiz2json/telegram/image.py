"""TelegramImage — an ImageSource backed by a Telegram photo or document."""
from telegram import Document, PhotoSize
from telegram.error import TelegramError

from quiz2json.errors import ReadError
from quiz2json.image_encoder import ImageSource


class TelegramImage(ImageSource):

    def __init__(self, attachment: PhotoSize | Document, mime_type: str) -> None:
        self._attachment = attachment
        self.mime_type = mime_type

    async def read(self) -> bytes:
        try:
            tg_file = await self._attachment.get_file()
            return bytes(await tg_file.download_as_bytearray())
        except TelegramError as exc:
            raise ReadError(f"Could not download Telegram file: {exc}") from exc
