"""Configuration models for the taiosd daemon.

``daemon.yaml`` has two sections: ``daemon`` (how the server is bound and
logged) and ``stream`` (how notification streams behave).
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import Field


class DaemonConfig(BaseModel):
    """Server binding, logging and CORS.

    The daemon always runs as a single process: open streams and the event bus
    that feeds them live in that process.
    """

    host: str = Field(default="127.0.0.1", description="Bind address ('0.0.0.0' exposes the daemon on the LAN)")
    port: int = Field(default=8430, ge=1024, le=65535, description="Bind port")
    log_level: str = Field(default="INFO", description="Root log level name")
    cors_origins: list[str] = Field(
        default=["*"],
        description="Browser origins allowed to open the notification stream",
    )


class StreamConfig(BaseModel):
    """Per-connection notification stream behavior."""

    heartbeat_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Seconds between heartbeat messages on an idle stream",
    )
    subscriber_queue_size: int = Field(
        default=256,
        ge=1,
        description="Messages buffered per stream before further events are dropped",
    )


class Config(BaseModel):
    """Complete daemon configuration."""

    daemon: DaemonConfig = Field(default_factory=DaemonConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
