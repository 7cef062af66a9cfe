"""
Life Planner — Entry Point.

`python main.py` reads chat messages from stdin and prints what was created.
`python main.py categorize "Team standup meeting"` prints an event category.
"""

import argparse
import asyncio
import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.adapters.store_factory import create_action_store, create_fallback_store
from src.config import settings
from src.core.action_service import ActionService
from src.core.categorizer import CategoryModel, EventCategorizer
from src.core.persistence import PersistenceAdapter


def _build_categorizer() -> EventCategorizer:
    return EventCategorizer(
        CategoryModel().build(),
        threshold=settings.CATEGORY_CONFIDENCE_THRESHOLD,
    )


async def _chat_loop(identity: str | None) -> None:
    service = ActionService(
        PersistenceAdapter(create_action_store(), create_fallback_store()),
        categorizer=_build_categorizer(),
    )
    while True:
        try:
            message = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        if not message.strip():
            continue
        result = await service.process_action(message, identity=identity)
        if result is None:
            print("(no action)")
        else:
            print(f"[{result.kind.value}/{result.outcome.value}] {result.message}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Life Planner action pipeline")
    parser.add_argument("--user", help="identity for the durable per-user store")
    sub = parser.add_subparsers(dest="command")
    categorize = sub.add_parser("categorize", help="print the category of an event")
    categorize.add_argument("summary")
    categorize.add_argument("--description", default="")
    categorize.add_argument("--location", default="")
    args = parser.parse_args()

    if args.command == "categorize":
        print(_build_categorizer().categorize(args.summary, args.description, args.location))
        return

    asyncio.run(_chat_loop(args.user))


if __name__ == "__main__":
    main()
