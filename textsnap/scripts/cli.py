"""
Recognize text in an image from the command line.

Usage:
    python -m textsnap.scripts.cli path/to/image.png
    python -m textsnap.scripts.cli shot.jpg --backend openai --plain
    python -m textsnap.scripts.cli --validate

Backend settings come from the stored config or env / .env (see textsnap.services.config).
Exit code is 1 when recognition fails or no text is found.
"""
import argparse
import logging
import sys

from dotenv import load_dotenv

from textsnap.adapters.ocr.factory import create_backend
from textsnap.core.prompts import PLAIN_TEXT_PROMPT
from textsnap.core.recognizer import recognize_image
from textsnap.services.config import get_backend_config
from textsnap.services.status_store import StatusStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="textsnap", description="Extract text from an image.")
    parser.add_argument("image", nargs="?", help="path to the image file")
    parser.add_argument("--backend", choices=["vision", "openai", "gemini"], help="override OCR_BACKEND")
    prompt = parser.add_mutually_exclusive_group()
    prompt.add_argument("--prompt", help="custom instruction for the remote model")
    prompt.add_argument("--plain", action="store_true", help="plain text only, no LaTeX conversion")
    parser.add_argument("--validate", action="store_true", help="check the backend config and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="log backend activity to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(override=False)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    status = StatusStore()
    config = get_backend_config(args.backend, status_store=status)

    if args.validate:
        backend = create_backend(config, status)
        ok = backend.validate_config()
        print(f"{backend.get_name()}: {'config OK' if ok else 'config INVALID'}")
        return 0 if ok else 1

    if not args.image:
        print("error: an image path is required", file=sys.stderr)
        return 2

    prompt = PLAIN_TEXT_PROMPT if args.plain else args.prompt
    outcome = recognize_image(config, args.image, prompt, status_store=status)
    if not outcome.ok:
        print(f"{outcome.error_title}: {outcome.error_message}", file=sys.stderr)
        return 1

    print(outcome.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
