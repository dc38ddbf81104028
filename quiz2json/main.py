"""Entry point — wires Config → InferenceClient → Converter → TelegramClient."""
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from quiz2json.config import Config
from quiz2json.constants import MSG_BOT_STARTING, MSG_CREDENTIAL_MISSING
from quiz2json.errors import MissingCredentialError
from quiz2json.inference.factory import make_inference_client
from quiz2json.pipeline import Converter
from quiz2json.telegram.client import TelegramClient


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    # stderr, so the CLI's stdout carries only JSON
    root.addHandler(RichHandler(console=Console(stderr=True), rich_tracebacks=True))


def main() -> None:
    config = Config.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    try:
        credential = config.credential()
    except MissingCredentialError as exc:
        logger.error(MSG_CREDENTIAL_MISSING, exc)
        sys.exit(1)

    logger.info(MSG_BOT_STARTING)
    client = make_inference_client(config, credential)
    bot = TelegramClient(
        config,
        converter_factory=lambda: Converter(client, strict=config.strict_schema),
    )
    bot.run()


if __name__ == "__main__":
    main()
