"""Application configuration using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from estate360.db.storage import PropertyStore
    from estate360.uploads import UploadManager


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ESTATE360_",
        extra="ignore",
    )

    # Record store
    storage_backend: Literal["json", "sqlite"] = Field(
        default="json",
        description="Which record store to use: flat JSON file or SQLite",
    )
    data_path: str = Field(
        default="data/properties.json",
        description="JSON file holding the full property record array",
    )
    sqlite_path: str = Field(
        default="data/properties.db",
        description="SQLite database file (used when storage_backend=sqlite)",
    )

    # Uploaded media
    uploads_dir: str = Field(
        default="public/uploads",
        description="Root directory for per-property media folders",
    )
    uploads_url_prefix: str = Field(
        default="/uploads",
        description="Public URL path under which uploads_dir is served",
    )
    video_size_hint_bytes: int = Field(
        default=1024 * 1024,
        ge=1,
        description="Unlabelled files larger than this are classified as video",
    )

    # Web server
    web_host: str = Field(default="0.0.0.0", description="Web server host")
    web_port: int = Field(default=8000, description="Web server port")
    json_logs: bool = Field(default=False, description="Emit JSON logs instead of console")
    debug: bool = Field(default=False, description="Enable debug-level logging")

    @property
    def data_dir(self) -> str:
        """Return the directory containing the record store."""
        path = self.sqlite_path if self.storage_backend == "sqlite" else self.data_path
        return str(Path(path).parent)

    def get_url_prefix(self) -> str:
        """Normalize uploads_url_prefix to a leading slash and no trailing slash."""
        prefix = self.uploads_url_prefix.strip().strip("/")
        return f"/{prefix}" if prefix else "/uploads"

    def build_store(self) -> PropertyStore:
        """Build the configured record store."""
        if self.storage_backend == "sqlite":
            from estate360.db.sqlite_store import SqliteStore

            return SqliteStore(self.sqlite_path)

        from estate360.db.storage import JsonFileStore

        return JsonFileStore(self.data_path)

    def build_upload_manager(self) -> UploadManager:
        """Build an upload manager rooted at uploads_dir."""
        from estate360.uploads import UploadManager

        return UploadManager(
            self.uploads_dir,
            url_prefix=self.get_url_prefix(),
            video_size_hint_bytes=self.video_size_hint_bytes,
        )
