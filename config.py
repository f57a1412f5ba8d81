from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Directory the console was installed into; the companion watcher ships next to it
INSTALL_ROOT = Path(__file__).resolve().parent


class Settings(BaseSettings):
    api_base_url: str = "http://localhost:3000"
    request_timeout: float = 60.0
    refresh_interval_ms: int = 500
    snipe_poll_interval_ms: int = 500
    console_root: Optional[Path] = None
    cancel_source: Literal["process", "keypress"] = "process"
    token_decimals: int = 18
    native_symbol: str = "BNB"
    log_file: str = "console.log"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def refresh_interval(self) -> float:
        return self.refresh_interval_ms / 1000

    @property
    def snipe_poll_interval(self) -> float:
        return self.snipe_poll_interval_ms / 1000

    def watcher_executable(self) -> Path:
        """Path of the companion process that exits once enter is hit"""
        root = self.console_root if self.console_root is not None else INSTALL_ROOT
        return Path(root) / "detect_enter.py"


settings = Settings()
