"""Presence directory: which connection currently represents which user.

One directory per application instance (kept on ``app.state``); tests build
their own. State is in memory only, so a restart forgets everyone and clients
re-register on reconnect.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from application.ports.realtime import ChannelKey


def channel_for(user_id: int | str) -> ChannelKey:
    """Per-user broadcast channel key.

    Numeric and string ids of the same user map to the same key
    (``5`` and ``"5"`` -> ``"5"``).
    """
    if user_id is None or isinstance(user_id, bool):
        raise ValueError("user id is required")
    key = str(user_id).strip()
    if not key:
        raise ValueError("user id is required")
    return ChannelKey(key)


@dataclass(frozen=True)
class RegisterResult:
    channel: ChannelKey
    # connection that represented this user before (now displaced)
    displaced_connection: Optional[str] = None
    # channel this connection was registered under before, if it switched users
    previous_channel: Optional[ChannelKey] = None


class PresenceDirectory:
    """In-memory ``user -> connection`` map with a reverse index.

    At most one connection per user: a later registration overwrites the
    earlier one without an explicit unregister.
    """

    def __init__(self) -> None:
        self._by_user: Dict[ChannelKey, str] = {}
        self._by_connection: Dict[str, ChannelKey] = {}

    def register(self, user_id: int | str, connection_id: str) -> RegisterResult:
        channel = channel_for(user_id)

        previous_channel = self._by_connection.get(connection_id)
        if previous_channel is not None and previous_channel != channel:
            if self._by_user.get(previous_channel) == connection_id:
                del self._by_user[previous_channel]
        else:
            previous_channel = None

        displaced = self._by_user.get(channel)
        if displaced == connection_id:
            displaced = None
        elif displaced is not None:
            self._by_connection.pop(displaced, None)

        self._by_user[channel] = connection_id
        self._by_connection[connection_id] = channel
        return RegisterResult(
            channel=channel,
            displaced_connection=displaced,
            previous_channel=previous_channel,
        )

    def unregister(self, connection_id: str) -> List[ChannelKey]:
        """Drop every entry owned by the connection; returns the affected channels."""
        removed: List[ChannelKey] = []
        channel = self._by_connection.pop(connection_id, None)
        if channel is not None and self._by_user.get(channel) == connection_id:
            del self._by_user[channel]
            removed.append(channel)
        return removed

    def lookup(self, user_id: int | str) -> Optional[str]:
        return self._by_user.get(channel_for(user_id))

    def user_of(self, connection_id: str) -> Optional[ChannelKey]:
        return self._by_connection.get(connection_id)

    def is_online(self, user_id: int | str) -> bool:
        return channel_for(user_id) in self._by_user

    def snapshot(self) -> Dict[str, str]:
        return dict(self._by_user)

    def __len__(self) -> int:
        return len(self._by_user)


__all__ = ["channel_for", "PresenceDirectory", "RegisterResult"]
