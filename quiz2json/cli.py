"""One-shot conversion: quiz2json-convert IMAGE → pretty JSON on stdout."""
import argparse
import asyncio
import logging
import sys

from quiz2json.config import Config
from quiz2json.constants import MSG_CONVERSION_FAILED_USER
from quiz2json.image_encoder import FileImage
from quiz2json.inference.factory import make_inference_client
from quiz2json.main import _setup_logging
from quiz2json.pipeline import Converter

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract quiz questions from an image as JSON")
    parser.add_argument("image", type=str, help="Path to the image file")
    parser.add_argument("--mime-type", type=str, default=None, help="Override the guessed MIME type")
    parser.add_argument("--strict", action="store_true", help="Reject JSON that is not a question file")
    return parser.parse_args(argv)


async def convert_file(config: Config, path: str, mime_type: str | None, strict: bool) -> str:
    client = make_inference_client(config, config.credential())
    converter = Converter(client, strict=strict or config.strict_schema)
    return await converter.convert(FileImage(path, mime_type))


def run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = Config.from_env(bot=False)
    _setup_logging(config.log_level)
    try:
        pretty = asyncio.run(convert_file(config, args.image, args.mime_type, args.strict))
    except Exception:
        logger.exception("Image conversion failed")
        print(MSG_CONVERSION_FAILED_USER, file=sys.stderr)
        return 1
    print(pretty)
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
