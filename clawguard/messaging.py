"""Messaging capabilities used by the approval workflow.

A capability can post a message, attach a reaction to it, and report the
reactions humans have added. Two implementations are provided:

- HostMessaging: delegates to the host runtime's ``message`` tool
- DiscordMessaging: talks to the Discord REST API directly
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v10"


class MessagingError(RuntimeError):
    """Raised when a messaging operation fails."""


@dataclass(frozen=True)
class Reaction:
    """A reaction symbol and the number of users (other than us) who added it."""
    symbol: str
    user_count: int = 0


class MessagingCapability(ABC):
    """Base class for messaging capabilities.

    Every operation is potentially failing I/O and may raise.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def send(self, channel_id: str, text: str) -> Optional[str]:
        """Post a message and return its identifier."""
        ...

    @abstractmethod
    def react(self, message_id: str, symbol: str) -> bool:
        """Attach a reaction to a previously sent message."""
        ...

    @abstractmethod
    def list_reactions(self, message_id: str) -> Optional[List[Reaction]]:
        """Return the current reactions on a previously sent message."""
        ...

    def release(self, message_id: str) -> None:
        """Forget a message once no further calls will reference it."""
        return None


class HostMessaging(MessagingCapability):
    """Capability backed by the host runtime's message tool.

    The tool is a callable taking one payload dict:
        {"action": "send", "target": channel, "message": text} -> {"messageId": ...}
        {"action": "react", "messageId": id, "emoji": symbol}
        {"action": "reactions", "messageId": id} -> [{"emoji": ..., "users": [...]}]
    """

    def __init__(self, message_func: Callable[[Dict[str, Any]], Any]):
        self._message_func = message_func

    @property
    def name(self) -> str:
        return "host"

    @classmethod
    def from_context(cls, context: Any) -> Optional['HostMessaging']:
        """Build from a host context object or dict, if it exposes a message tool."""
        if context is None:
            return None
        if isinstance(context, dict):
            message_func = context.get("message")
        else:
            message_func = getattr(context, "message", None)
        if not callable(message_func):
            return None
        return cls(message_func)

    def send(self, channel_id: str, text: str) -> Optional[str]:
        result = self._message_func({
            "action": "send",
            "target": channel_id,
            "message": text,
        })
        if isinstance(result, dict):
            message_id = result.get("messageId")
            return str(message_id) if message_id else None
        return None

    def react(self, message_id: str, symbol: str) -> bool:
        result = self._message_func({
            "action": "react",
            "messageId": message_id,
            "emoji": symbol,
        })
        return result is not False

    def list_reactions(self, message_id: str) -> Optional[List[Reaction]]:
        result = self._message_func({
            "action": "reactions",
            "messageId": message_id,
        })
        if not result:
            return None

        reactions = []
        for entry in result:
            users = entry.get("users")
            if isinstance(users, list):
                count = len(users)
            else:
                count = int(entry.get("count", 0))
            reactions.append(Reaction(symbol=entry.get("emoji", ""), user_count=count))
        return reactions


class DiscordMessaging(MessagingCapability):
    """Capability that talks to the Discord REST API with a bot token.

    Discord addresses messages by channel, so the channel of every sent
    message is remembered for the later react/list calls until it is
    released.
    """

    def __init__(self, bot_token: str, api_base: str = DISCORD_API_BASE, timeout: float = 10.0):
        if not bot_token:
            raise ValueError("DiscordMessaging requires a bot token")
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "Authorization": f"Bot {bot_token}",
            "Content-Type": "application/json",
        }
        self._channels: Dict[str, str] = {}

    @property
    def name(self) -> str:
        return "discord"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            response = requests.request(
                method,
                f"{self._api_base}{path}",
                headers=self._headers,
                timeout=self._timeout,
                **kwargs,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.debug("Discord %s %s failed", method, path, exc_info=True)
            raise MessagingError(f"Discord {method} {path} failed: {e}") from e
        return response

    def _message_path(self, message_id: str) -> str:
        channel_id = self._channels.get(message_id)
        if channel_id is None:
            raise MessagingError(f"Unknown message: {message_id}")
        return f"/channels/{channel_id}/messages/{message_id}"

    def send(self, channel_id: str, text: str) -> Optional[str]:
        response = self._request("POST", f"/channels/{channel_id}/messages", json={"content": text})
        message_id = response.json().get("id")
        if message_id:
            self._channels[str(message_id)] = channel_id
            return str(message_id)
        return None

    def react(self, message_id: str, symbol: str) -> bool:
        path = f"{self._message_path(message_id)}/reactions/{quote(symbol)}/@me"
        self._request("PUT", path)
        return True

    def list_reactions(self, message_id: str) -> Optional[List[Reaction]]:
        data = self._request("GET", self._message_path(message_id)).json()

        reactions = []
        for entry in data.get("reactions", []):
            count = int(entry.get("count", 0))
            # Our own affordance reaction is included in the count
            if entry.get("me"):
                count -= 1
            symbol = (entry.get("emoji") or {}).get("name", "")
            reactions.append(Reaction(symbol=symbol, user_count=max(count, 0)))
        return reactions

    def release(self, message_id: str) -> None:
        self._channels.pop(message_id, None)


def create_messaging(kind: str, config: Optional[Dict[str, Any]] = None) -> MessagingCapability:
    """Factory function to create a messaging capability by kind.

    Args:
        kind: One of "host", "discord"
        config: "host" needs "message_func"; "discord" needs "bot_token"
            and accepts "api_base" and "timeout"

    Raises:
        ValueError: If the kind is unknown or required config is missing
    """
    config = config or {}

    if kind == "host":
        message_func = config.get("message_func")
        if not callable(message_func):
            raise ValueError("HostMessaging requires a callable 'message_func'")
        return HostMessaging(message_func)

    if kind == "discord":
        return DiscordMessaging(
            bot_token=config.get("bot_token", ""),
            api_base=config.get("api_base", DISCORD_API_BASE),
            timeout=config.get("timeout", 10.0),
        )

    raise ValueError(f"Unknown messaging kind: {kind}. Available: ['host', 'discord']")
