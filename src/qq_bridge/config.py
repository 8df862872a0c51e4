"""Configuration loading and validation."""

from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class NotifyConfig(BaseModel):
    """Which QQ group events are relayed to the bridge as notices."""

    join: bool = False
    leave: bool = False
    setadmin: bool = False
    ban: bool = False
    sysmessage: bool = False


class CacheConfig(BaseModel):
    """Sizes and lifetimes (seconds) of the processor's two caches."""

    cash_dedup_size: int = Field(default=500, ge=1)
    cash_dedup_ttl: float = Field(default=300.0, gt=0)
    member_info_size: int = Field(default=500, ge=1)
    member_info_ttl: float = Field(default=3600.0, gt=0)


class QQOptions(BaseModel):
    """Options specific to the QQ processor."""

    notify: NotifyConfig = Field(default_factory=NotifyConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


class StyleTemplates(BaseModel):
    """Templates for each kind of outgoing message."""

    message: str
    reply: str
    forward: str
    action: str
    notice: str


def _simple_style() -> StyleTemplates:
    return StyleTemplates(
        message="[{nick}] {text}",
        reply="[{nick}] Re {reply_nick} 「{reply_text}」: {text}",
        forward="[{nick}] Fwd {forward_nick}: {text}",
        action="* {nick} {text}",
        notice="< {text} >",
    )


def _complex_style() -> StyleTemplates:
    return StyleTemplates(
        message="[{client_short} - {nick}] {text}",
        reply="[{client_short} - {nick}] Re {reply_nick} 「{reply_text}」: {text}",
        forward="[{client_short} - {nick}] Fwd {forward_nick}: {text}",
        action="* {client_short} - {nick} {text}",
        notice="< {client_full}: {text} >",
    )


class MessageStyleConfig(BaseModel):
    """Message templates for the two display modes.

    ``simple`` is used while only two platforms are bridged; ``complex``
    prefixes the source client once three or more are connected.
    """

    simple: StyleTemplates = Field(default_factory=_simple_style)
    complex: StyleTemplates = Field(default_factory=_complex_style)


class MonitoringConfig(BaseModel):
    """Logging configuration."""

    structured_logging: bool = False
    log_file: str | None = None


class AppConfig(BaseModel):
    """Top-level application configuration."""

    qq: QQOptions = Field(default_factory=QQOptions)
    message_style: MessageStyleConfig = Field(default_factory=MessageStyleConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)


def load_config(path: Path) -> AppConfig:
    """Load config from a YAML file."""
    load_dotenv(path.parent / ".env", override=False)
    raw: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} does not contain a YAML mapping")
    return AppConfig(**raw)
