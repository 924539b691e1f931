"""
Agentarium client

Connects to the Agentarium API and keeps the 3D terrain scene in sync with
pushed filesystem and agent events.

Usage:
    python -m agentarium_client [--url URL] [--path DIR] [--log-level LEVEL]
"""

import argparse
import asyncio
import logging
import signal

from agentarium_client.app import AgentariumApp
from agentarium_client.config import Settings, websocket_url_for

logger = logging.getLogger("agentarium_client")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Agentarium client")
    parser.add_argument("--url", help="Agentarium API base URL (default: $AGENTARIUM_URL or http://localhost:8000)")
    parser.add_argument("--path", help="Directory to load as terrain on startup")
    parser.add_argument("--fps", type=float, default=60.0, help="Scene update rate")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.url:
        settings = settings.model_copy(update={
            "api_url": args.url.rstrip("/"),
            "ws_url": websocket_url_for(args.url),
        })
    return settings


async def run(args: argparse.Namespace):
    app = AgentariumApp(settings=build_settings(args))

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, app.stop)
        except NotImplementedError:
            logger.debug(f"Signal handlers not supported, {sig.name} not handled")

    if args.path:
        try:
            app.directory_picker.select(args.path)
        except ValueError as e:
            logger.error(str(e))
            await app.api.close()
            return

    await app.run(fps=args.fps)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Agentarium client")
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
