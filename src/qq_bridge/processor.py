"""QQ processor: QQ events in, bridge messages out, and back again."""

import asyncio
import logging
import re
from typing import Any

from pydantic import ValidationError

from qq_bridge.cache import BoundedTTLCache
from qq_bridge.client import Bridge, QQClient
from qq_bridge.config import AppConfig
from qq_bridge.events import (
    AdminEvent,
    BanEvent,
    GroupMemberInfo,
    JoinEvent,
    LeaveEvent,
    QQEvent,
    TextEvent,
)
from qq_bridge.formatting import TemplateFields, render, select_template
from qq_bridge.models import BridgeMessage

logger = logging.getLogger(__name__)


def _member_key(member_id: int | str, group: int | str) -> str:
    return f"{member_id}@{group}"


class QQProcessor:
    """Translate between the QQ client library and the bridge.

    Inbound events are fed to :meth:`handle`; messages relayed from other
    platforms are delivered with :meth:`receive`. Both caches belong to the
    instance, so several processors never share state.
    """

    def __init__(self, bridge: Bridge, client: QQClient, config: AppConfig) -> None:
        self._bridge = bridge
        self._client = client
        self._config = config
        cache_cfg = config.qq.cache
        self._cash_notices = BoundedTTLCache(cache_cfg.cash_dedup_size, cache_cfg.cash_dedup_ttl)
        self._members = BoundedTTLCache(cache_cfg.member_info_size, cache_cfg.member_info_ttl)

    @property
    def cash_notices(self) -> BoundedTTLCache:
        """Red-packet texts already announced, keyed ``"<group>: <text>"``."""
        return self._cash_notices

    @property
    def members(self) -> BoundedTTLCache:
        """Recently resolved group members, keyed ``"<user_id>@<group>"``."""
        return self._members

    async def handle(self, event: QQEvent) -> None:
        """Process one inbound QQ event."""
        if isinstance(event, TextEvent):
            await self.on_text(event)
        elif isinstance(event, JoinEvent):
            await self.on_join(event)
        elif isinstance(event, LeaveEvent):
            await self.on_leave(event)
        elif isinstance(event, AdminEvent):
            await self.on_admin(event)
        elif isinstance(event, BanEvent):
            await self.on_ban(event)
        else:
            logger.warning("Ignoring unknown QQ event %r", type(event).__name__)

    # -- QQ -> bridge ---------------------------------------------------

    async def _dispatch(self, message: BridgeMessage) -> bool:
        """Send *message* to the bridge; failures are logged and discarded."""
        try:
            await self._bridge.send(message)
        except Exception:
            logger.warning(
                "Bridge dispatch from QQ %s failed",
                message.to,
                exc_info=True,
                extra={"extra_data": {"chat": message.to, "nick": message.nick, "notice": message.is_notice}},
            )
            return False
        return True

    def _notice(self, group: int, nick: str, text: str, raw: dict[str, Any]) -> BridgeMessage:
        return BridgeMessage(
            from_=group,
            to=group,
            nick=nick,
            text=text,
            is_notice=True,
            handler=self._client,
            raw=raw,
        )

    async def on_text(self, event: TextEvent) -> None:
        message = event.message
        notify = self._config.qq.notify

        # with the toggle off, system messages are relayed like any other text
        if event.is_system and notify.sysmessage:
            await self._dispatch(message.derive(is_notice=True))
            return

        if message.extra.is_cash:
            key = f"{message.to}: {message.text}"
            if not self._cash_notices.has(key):
                self._cash_notices.set(key, True)
                await self._dispatch(message.derive(text=f"已暫時屏蔽「{message.text}」", is_notice=True))
            else:
                logger.debug("Suppressed repeated red packet in %s", message.to)
            return

        if not event.is_private and message.extra.ats:
            try:
                text = await self._resolve_ats(message)
            except Exception:
                logger.warning("Mention rewrite in QQ %s failed; relaying original text", message.to, exc_info=True)
            else:
                message = message.derive(text=text)

        await self._dispatch(message)

    async def _lookup_member(self, group: int | str, member_id: int) -> GroupMemberInfo | None:
        cached = self._members.get(_member_key(member_id, group))
        if cached is not None:
            return cached
        try:
            info = await self._client.group_member_info(group, member_id)
            if info is None or isinstance(info, GroupMemberInfo):
                return info
            return GroupMemberInfo.model_validate(info)
        except ValidationError:
            logger.debug("Malformed member info for %s in %s", member_id, group, exc_info=True)
            return None
        except Exception:
            logger.debug("Member lookup for %s in %s failed", member_id, group, exc_info=True)
            return None

    async def _resolve_ats(self, message: BridgeMessage) -> str:
        """Replace ``[CQ:at,qq=...]`` codes in the text with ``＠nick``."""
        group = message.to
        infos = await asyncio.gather(*(self._lookup_member(group, at) for at in message.extra.ats))
        text = message.text
        for info in infos:
            if info is None:
                continue
            self._members.set(_member_key(info.user_id, group), info)
            at_text = f"＠{self._client.escape(self._client.get_nick(info))}"
            text = re.sub(rf"\[CQ:at,qq={info.user_id}\]", lambda _m: at_text, text)
        return text

    async def on_join(self, event: JoinEvent) -> None:
        if not self._config.qq.notify.join:
            return
        text = f"{event.target_name} ({event.target}) 加入QQ群"
        await self._dispatch(self._notice(event.group, event.target_name, text, event.raw))

    async def on_leave(self, event: LeaveEvent) -> None:
        if event.voluntary:
            text = f"{event.target_name} ({event.target}) 退出QQ群"
        else:
            text = f"{event.target_name} ({event.target}) 被管理員 {event.admin_name} ({event.admin}) 踢出QQ群"

        self._members.delete(_member_key(event.target, event.group))

        if not self._config.qq.notify.leave:
            return
        await self._dispatch(self._notice(event.group, event.target_name, text, event.raw))

    async def on_admin(self, event: AdminEvent) -> None:
        if not self._config.qq.notify.setadmin:
            return
        if event.revoked:
            text = f"{event.target_name} ({event.target}) 被取消管理員"
        else:
            text = f"{event.target_name} ({event.target}) 成為管理員"
        await self._dispatch(self._notice(event.group, event.target_name, text, event.raw))

    async def on_ban(self, event: BanEvent) -> None:
        if not self._config.qq.notify.ban:
            return
        if event.banned:
            text = f"{event.target_name} ({event.target}) 被禁言{event.duration}"
        else:
            text = f"{event.target_name} ({event.target}) 被解除禁言"
        await self._dispatch(self._notice(event.group, event.target_name, text, event.raw))

    # -- bridge -> QQ ---------------------------------------------------

    def format_outgoing(self, message: BridgeMessage) -> str:
        """Render a relayed message as the QQ text that :meth:`receive` sends."""
        template = select_template(self._config.message_style, message)
        output = self._client.escape(render(template, TemplateFields.from_message(message)))

        uploads = message.extra.uploads
        if self._client.is_coolq_pro:
            # CoolQ Pro can post images inline
            if uploads:
                output += "\n" + "".join(f"[CQ:image,file={u.url}]" for u in uploads)
        else:
            output += self._client.escape("".join(f" {u.url}" for u in uploads))
        return output

    async def receive(self, message: BridgeMessage) -> None:
        """Deliver a message relayed from another platform to QQ.

        Delivery failures are logged and re-raised to the caller.
        """
        output = self.format_outgoing(message)
        try:
            await self._client.say(message.to, output, no_escape=True)
        except Exception:
            logger.exception("Failed to deliver message to QQ %s", message.to)
            raise
