"""Structural protocols for the processor's collaborators.

The bridge dispatcher and the QQ client library are provided by the host
application; any object with these methods can be plugged in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from qq_bridge.events import GroupMemberInfo
    from qq_bridge.models import BridgeMessage


class Bridge(Protocol):
    """Fans a message out to every connected platform except its origin."""

    async def send(self, message: BridgeMessage) -> Any: ...


class QQClient(Protocol):
    """The subset of the QQ client library the processor talks to."""

    @property
    def is_coolq_pro(self) -> bool: ...

    def escape(self, text: str) -> str: ...

    def get_nick(self, member: GroupMemberInfo) -> str: ...

    async def say(self, target: int | str, text: str, *, no_escape: bool = False) -> Any: ...

    async def group_member_info(self, group: int | str, member_id: int) -> GroupMemberInfo | dict[str, Any] | None: ...
