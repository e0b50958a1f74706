"""Discord notifier.

Formats inventory diffs and posts them to a Discord channel through the
bot REST API.  A channel that cannot be resolved, or that cannot hold
text, is reported as unavailable and skipped without failing the sweep.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .config import DISCORD_API_BASE, REQUEST_TIMEOUT_SECONDS
from .diff import InventoryDiff
from .utils import HTTPError, get_http_session, retryable_request

logger = logging.getLogger(__name__)

# Discord rejects message content longer than this.
MAX_MESSAGE_LENGTH = 2000

# Channel types that accept messages: text, DM, voice, group DM,
# announcement, the three thread kinds and stage.
TEXT_CHANNEL_TYPES = frozenset({0, 1, 2, 3, 5, 10, 11, 12, 13})

ITEM_SEPARATOR = ", "


class NotificationError(Exception):
    """A message could not be delivered."""


class ChannelUnavailableError(NotificationError):
    """Channel is unknown, forbidden or not text based."""


@retryable_request
def _get(session: requests.Session, url: str, **kwargs) -> requests.Response:
    return session.get(url, **kwargs)


@retryable_request
def _post(session: requests.Session, url: str, **kwargs) -> requests.Response:
    return session.post(url, **kwargs)


def _format_items(items) -> str:
    return ITEM_SEPARATOR.join(f"{name} x{delta}" for name, delta in items)


def format_diff_message(account_id: str, diff: InventoryDiff, mention: Optional[str] = None) -> str:
    msg = ""
    if mention:
        msg += f"<@{mention}> "
    msg += f"⚡ Inventory change detected for **STEAM ID: {account_id}**:\n"
    if diff.added:
        msg += f"🟢 Added: {_format_items(diff.added)}\n"
    if diff.removed:
        msg += f"🔴 Removed: {_format_items(diff.removed)}\n"
    return msg


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """Split text into chunks of at most ``limit`` characters.

    Breaks on line boundaries where possible; a single overlong line is cut
    into fixed-size pieces.
    """
    chunks: List[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


class DiscordClient:
    """Minimal Discord bot client over the REST API."""

    def __init__(
        self,
        token: str,
        *,
        api_base: str = DISCORD_API_BASE,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or get_http_session({"Authorization": f"Bot {token}"})
        self.user_tag: Optional[str] = None

    def _url(self, path: str) -> str:
        return f"{self.api_base}/{path.lstrip('/')}"

    def wait_until_ready(self) -> str:
        """Confirm the token works and return the bot's tag."""
        resp = _get(self.session, self._url("/users/@me"), timeout=self.timeout)
        user = resp.json()
        name = user.get("username", "unknown")
        discriminator = user.get("discriminator")
        self.user_tag = f"{name}#{discriminator}" if discriminator not in (None, "", "0") else name
        return self.user_tag

    def fetch_channel(self, channel_id: str) -> Dict[str, Any]:
        try:
            resp = _get(self.session, self._url(f"/channels/{channel_id}"), timeout=self.timeout)
        except HTTPError as e:
            if e.status in (403, 404):
                raise ChannelUnavailableError(f"Channel {channel_id} not found or not accessible") from e
            raise
        channel = resp.json()
        if not isinstance(channel, dict) or channel.get("type") not in TEXT_CHANNEL_TYPES:
            raise ChannelUnavailableError(f"Channel {channel_id} is not text-based")
        return channel

    def send_message(self, channel_id: str, text: str) -> None:
        for chunk in split_message(text):
            _post(
                self.session,
                self._url(f"/channels/{channel_id}/messages"),
                json={"content": chunk},
                timeout=self.timeout,
            )

    def close(self) -> None:
        self.session.close()


class Notifier:
    """Posts inventory changes for tracked accounts to one channel."""

    def __init__(self, client: DiscordClient, channel_id: str, mention: Optional[str] = None) -> None:
        self.client = client
        self.channel_id = channel_id
        self.mention = mention

    def _deliver(self, text: str, what: str) -> bool:
        try:
            self.client.fetch_channel(self.channel_id)
            self.client.send_message(self.channel_id, text)
        except ChannelUnavailableError as e:
            logger.warning("Cannot send %s: %s", what, e)
            return False
        except (HTTPError, requests.RequestException) as e:
            raise NotificationError(f"Failed to send {what}: {e}") from e
        return True

    def notify(self, account_id: str, diff: InventoryDiff) -> bool:
        """Send a change message; False if the channel is unavailable."""
        text = format_diff_message(account_id, diff, mention=self.mention)
        logger.info(
            "Sending change notification for %s (+%d / -%d item types)",
            account_id, len(diff.added), len(diff.removed),
        )
        return self._deliver(text, f"message for {account_id}")

    def announce_ready(self, account_count: int) -> bool:
        text = f"✅ Bot is online and ready to post inventory changes for **{account_count}** IDs!"
        return self._deliver(text, "startup message")


__all__ = [
    "NotificationError",
    "ChannelUnavailableError",
    "DiscordClient",
    "Notifier",
    "format_diff_message",
    "split_message",
]
