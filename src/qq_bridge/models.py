"""Neutral bridge message shared by every platform processor."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClientName(BaseModel):
    """Display names of the platform a message came from."""

    shortname: str = ""
    fullname: str = ""


class ReplyInfo(BaseModel):
    """The message being replied to."""

    nick: str = ""
    username: str = ""
    message: str = ""
    is_text: bool = True


class ForwardInfo(BaseModel):
    """The original author of a forwarded message."""

    nick: str = ""
    username: str = ""


class Upload(BaseModel):
    """A file or image attached to a message, already uploaded somewhere public."""

    url: str


class MessageExtra(BaseModel):
    """Platform metadata carried alongside the message text."""

    clients: int = 0
    client_name: ClientName = Field(default_factory=ClientName)
    reply: ReplyInfo | None = None
    forward: ForwardInfo | None = None
    is_action: bool = False
    uploads: list[Upload] = Field(default_factory=list)
    ats: list[int] = Field(default_factory=list)  # QQ ids mentioned with [CQ:at]
    is_cash: bool = False  # password red packet


class BridgeMessage(BaseModel):
    """A chat message or notice in the bridge's platform-neutral shape.

    ``from_``/``to`` are platform-local chat ids; ``handler`` is the client
    that produced the message and is never serialized.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_: int | str = Field(alias="from")
    to: int | str
    nick: str = ""
    text: str = ""
    is_notice: bool = False
    command: str = ""
    param: str = ""
    extra: MessageExtra = Field(default_factory=MessageExtra)
    handler: Any = Field(default=None, exclude=True)
    raw: Any = Field(default=None, exclude=True)

    def derive(self, **overrides: Any) -> "BridgeMessage":
        """Return a copy of this message with ``overrides`` applied."""
        return self.model_copy(update=overrides)
