"""Settings for the admin notification client.

Contract:
- Inputs: Environment variables (TAIOS_*), optional .env file
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class ClientSettings(BaseSettings):
    """Configuration for a notification client.

    Attributes:
        stream_url: URL of the admin notification SSE endpoint
        admin_id: Admin identity used to scope the stream (None = do not connect)
        max_reconnect_attempts: Reconnects scheduled before giving up
        reconnect_base_delay: First backoff delay in seconds
        reconnect_max_delay: Backoff cap in seconds
        max_notifications: Notifications retained, most recent first
        idle_timeout: Read timeout in seconds; a silent connection errors after this
        connect_timeout: Connect timeout in seconds

    Example:
        >>> settings = ClientSettings(admin_id="admin-1")
        >>> assert settings.max_reconnect_attempts == 5
    """

    model_config = SettingsConfigDict(
        env_prefix="TAIOS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    stream_url: str = "http://127.0.0.1:8430/api/admin/notifications/stream"
    admin_id: str | None = None

    max_reconnect_attempts: int = Field(default=5, ge=0)
    reconnect_base_delay: float = Field(default=1.0, gt=0)
    reconnect_max_delay: float = Field(default=30.0, gt=0)

    max_notifications: int = Field(default=100, ge=1)

    idle_timeout: float | None = Field(default=90.0, gt=0)
    connect_timeout: float = Field(default=10.0, gt=0)
