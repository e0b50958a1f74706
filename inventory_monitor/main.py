from __future__ import annotations

import functools
import logging
import sys

import requests

from . import config, health, inventory
from .notifier import DiscordClient, NotificationError, Notifier
from .scheduler import InventoryScheduler
from .utils import HTTPError, get_http_session


def setup_logging() -> None:
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main() -> None:
    """Validate configuration, wait for Discord, then poll forever."""
    setup_logging()
    logger = logging.getLogger(__name__)

    try:
        config.validate()
    except config.ConfigError as e:
        logger.error("FATAL: %s", e)
        sys.exit(1)

    if config.HEALTH_SERVER_ENABLED:
        health.start_server(config.PORT)
    else:
        logger.info("Web server disabled.")

    client = DiscordClient(config.TOKEN, api_base=config.DISCORD_API_BASE)
    try:
        tag = client.wait_until_ready()
    except (HTTPError, requests.RequestException) as e:
        logger.error("FATAL: could not log in to Discord: %s", e)
        client.close()
        sys.exit(1)
    logger.info("✅ Logged in as %s", tag)

    notifier = Notifier(client, config.CHANNEL_ID, mention=config.MENTION_USER_ID)
    session = get_http_session()
    scheduler = InventoryScheduler(
        config.STEAM_IDS,
        notifier,
        fetch=functools.partial(inventory.fetch_inventory, session=session),
        interval=config.CHECK_INTERVAL_SECONDS,
    )

    try:
        scheduler.run_baseline()
        if config.ANNOUNCE_STARTUP:
            try:
                notifier.announce_ready(len(config.STEAM_IDS))
            except NotificationError:
                logger.exception("Startup message failed")
        scheduler.run_forever()
    finally:
        session.close()
        client.close()


if __name__ == "__main__":
    main()
