# taskclient/__main__.py
"""Interactive terminal client: ``python -m taskclient [--url URL]``."""

import argparse
import asyncio
import logging

from taskclient import config
from taskclient.api import TasksAPI
from taskclient.app import TaskApp, run_repl
from taskclient.store import TaskStore


async def _read_line(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


async def _confirm(prompt: str) -> bool:
    answer = await asyncio.to_thread(input, f"{prompt} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


async def main(base_url: str) -> None:
    async with TasksAPI(base_url) as api:
        app = TaskApp(TaskStore(api), confirm=_confirm)
        await run_repl(app, _read_line)


def cli() -> None:
    parser = argparse.ArgumentParser(description="Terminal client for the task tracker API")
    parser.add_argument("--url", default=config.BASE_URL, help="API base URL (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log requests to stderr")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(main(args.url))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    cli()
