"""Inbound QQ events and the payload shapes the client library delivers."""

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from qq_bridge.models import BridgeMessage

# Sender id QQ uses for "application" / system messages
SYSTEM_SENDER_ID = 1000000


def _name(data: dict[str, Any], key: str) -> str:
    """Read ``data[key]["name"]``, tolerating a missing or null user object."""
    user = data.get(key) or {}
    return str(user.get("name") or "")


class TextEvent(BaseModel):
    """A chat message posted in a QQ group or private chat."""

    kind: Literal["text"] = "text"
    message: BridgeMessage
    is_private: bool = False

    @property
    def is_system(self) -> bool:
        return str(self.message.from_) == str(SYSTEM_SENDER_ID)


class JoinEvent(BaseModel):
    """A member joined a group."""

    kind: Literal["join"] = "join"
    group: int
    target: int
    target_name: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "JoinEvent":
        return cls(
            group=data["group"],
            target=data["target"],
            target_name=_name(data, "user_target"),
            raw=data,
        )


class LeaveEvent(BaseModel):
    """A member left a group, or was removed by an admin.

    ``action_type`` 1 means the member left on their own.
    """

    kind: Literal["leave"] = "leave"
    group: int
    target: int
    target_name: str = ""
    action_type: int = 1
    admin: int | None = None
    admin_name: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def voluntary(self) -> bool:
        return self.action_type == 1

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "LeaveEvent":
        return cls(
            group=data["group"],
            target=data["target"],
            target_name=_name(data, "user_target"),
            action_type=data.get("type", 1),
            admin=data.get("admin"),
            admin_name=_name(data, "user_admin"),
            raw=data,
        )


class AdminEvent(BaseModel):
    """A member was granted or stripped of group admin.

    ``action_type`` 1 means admin was revoked.
    """

    kind: Literal["admin"] = "admin"
    group: int
    target: int
    target_name: str = ""
    action_type: int = 2
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def revoked(self) -> bool:
        return self.action_type == 1

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "AdminEvent":
        return cls(
            group=data["group"],
            target=data["target"],
            target_name=_name(data, "user"),
            action_type=data.get("type", 2),
            raw=data,
        )


class BanEvent(BaseModel):
    """A member was muted or unmuted.

    ``action_type`` 1 means muted, with ``duration`` a human-readable length
    already formatted by the client library.
    """

    kind: Literal["ban"] = "ban"
    group: int
    target: int
    target_name: str = ""
    action_type: int = 1
    duration: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def banned(self) -> bool:
        return self.action_type == 1

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "BanEvent":
        return cls(
            group=data["group"],
            target=data["target"],
            target_name=_name(data, "user_target"),
            action_type=data.get("type", 1),
            duration=str(data.get("durstr") or ""),
            raw=data,
        )


QQEvent = TextEvent | JoinEvent | LeaveEvent | AdminEvent | BanEvent


class GroupMemberInfo(BaseModel):
    """A group member as returned by the member-info lookup.

    Both the CoolQ HTTP API naming (``user_id``/``nickname``/``card``) and
    the older ``qq``/``name``/``groupCard`` naming are accepted.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(validation_alias=AliasChoices("user_id", "qq"))
    nickname: str = Field(default="", validation_alias=AliasChoices("nickname", "name"))
    card: str = Field(default="", validation_alias=AliasChoices("card", "groupCard"))

    @field_validator("nickname", "card", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value
