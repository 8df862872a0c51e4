"""Rendering of outgoing messages through the configured style templates."""

from __future__ import annotations

from string import Formatter
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from qq_bridge.config import MessageStyleConfig
    from qq_bridge.models import BridgeMessage

StyleMode = Literal["simple", "complex"]
MessageKind = Literal["notice", "action", "reply", "forward", "message"]

# Number of bridged platforms from which the source client is shown
COMPLEX_STYLE_MIN_CLIENTS = 3


class TemplateFields(BaseModel):
    """Every name a message template may reference."""

    nick: str | None = None
    from_: int | str | None = Field(default=None, serialization_alias="from")
    to: int | str | None = None
    text: str | None = None
    client_short: str | None = None
    client_full: str | None = None
    command: str | None = None
    param: str | None = None
    reply_nick: str | None = None
    reply_user: str | None = None
    reply_text: str | None = None
    forward_nick: str | None = None
    forward_user: str | None = None

    @classmethod
    def from_message(cls, message: BridgeMessage) -> TemplateFields:
        extra = message.extra
        fields = cls(
            nick=message.nick,
            from_=message.from_,
            to=message.to,
            text=message.text,
            client_short=extra.client_name.shortname,
            client_full=extra.client_name.fullname,
            command=message.command,
            param=message.param,
        )
        if extra.reply is not None:
            fields.reply_nick = extra.reply.nick
            fields.reply_user = extra.reply.username
            fields.reply_text = truncate(extra.reply.message) if extra.reply.is_text else extra.reply.message
        if extra.forward is not None:
            fields.forward_nick = extra.forward.nick
            fields.forward_user = extra.forward.username
        return fields


class _LenientFormatter(Formatter):
    """``str.format`` that never fails on a user-configured template.

    Unknown or empty names, bad ``.attr``/``[index]`` lookups and positional
    fields render as ``""``; an invalid format spec renders the plain value.
    """

    def get_value(self, key: int | str, args: Any, kwargs: Any) -> Any:
        if isinstance(key, int):
            return ""
        value = kwargs.get(key)
        return "" if value is None else value

    def get_field(self, field_name: str, args: Any, kwargs: Any) -> tuple[Any, str]:
        try:
            return super().get_field(field_name, args, kwargs)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError):
            return "", field_name

    def format_field(self, value: Any, format_spec: str) -> Any:
        try:
            return super().format_field(value, format_spec)
        except (TypeError, ValueError):
            return str(value)


_formatter = _LenientFormatter()


def render(template: str, fields: TemplateFields) -> str:
    """Interpolate ``{name}`` placeholders in *template* from *fields*."""
    return _formatter.vformat(template, (), fields.model_dump(by_alias=True))


def truncate(text: str, max_len: int = 10) -> str:
    """Collapse *text* onto one line and shorten it to at most *max_len* chars."""
    text = text.replace("\n", "")
    if len(text) > max_len:
        text = text[: max_len - 3] + "..."
    return text


def style_mode(message: BridgeMessage) -> StyleMode:
    extra = message.extra
    if extra.clients >= COMPLEX_STYLE_MIN_CLIENTS and (extra.client_name.shortname or message.is_notice):
        return "complex"
    return "simple"


def message_kind(message: BridgeMessage) -> MessageKind:
    if message.is_notice:
        return "notice"
    if message.extra.is_action:
        return "action"
    if message.extra.reply is not None:
        return "reply"
    if message.extra.forward is not None:
        return "forward"
    return "message"


def select_template(style: MessageStyleConfig, message: BridgeMessage) -> str:
    """Pick the template for *message* by display mode and message kind."""
    templates = getattr(style, style_mode(message))
    return getattr(templates, message_kind(message))
