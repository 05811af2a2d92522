"""Walk through string, chat and multi-modal prompt templates."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from pathlib import Path

from dotenv import load_dotenv

from examples.quickstart.prompts import bot_prompt, image_prompt, joke_prompt
from promptcraft import PromptManager

PROMPT_DIR = Path(__file__).resolve().parent / "templates"
DEFAULT_IMAGE_URL = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/d/dd/"
    "Gfp-wisconsin-madison-the-nature-boardwalk.jpg/"
    "2560px-Gfp-wisconsin-madison-the-nature-boardwalk.jpg"
)


def build_examples(image: str) -> dict[str, object]:
    """Format each quickstart prompt and return the results."""

    joke = joke_prompt().format(adjective="funny", content="chickens")
    messages = bot_prompt().format_messages(
        name="Bob", user_input="What is your name?"
    )
    image_messages = asyncio.run(
        image_prompt().aformat_messages(
            question="What is shown here?", image_url=image
        )
    )
    summary = PromptManager(PROMPT_DIR).get_prompt("summarize.yaml")
    summary_messages = summary.format_messages(  # type: ignore[attr-defined]
        kind="articles", sentences=2, text="Prompt templates are reusable."
    )
    return {
        "joke": joke,
        "chat": [message.to_dict() for message in messages],
        "image": [message.to_dict() for message in image_messages],
        "summary": [message.to_dict() for message in summary_messages],
    }


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Format the quickstart prompt templates"
    )
    parser.add_argument(
        "--image",
        type=str,
        default=DEFAULT_IMAGE_URL,
        help="Image URL to attach to the multi-modal prompt",
    )
    args = parser.parse_args()

    load_dotenv()
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO, format="%(levelname)s %(name)s: %(message)s"
        )
    print(json.dumps(build_examples(args.image), indent=2))


if __name__ == "__main__":
    main()
