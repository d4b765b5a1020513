from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    db_url: str = "sqlite+aiosqlite:///./tennis_club.db"
    env: Literal["prod", "dev"] = "prod"

    # Calendar-day logic (duplicate challenges, daily match stats)
    club_timezone: str = "UTC"

    # Avatars
    avatar_base_url: str = "https://api.dicebear.com/7.x/avataaars/svg"

    # JWT & token settings
    # IMPORTANT: set in environment for production
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    access_token_ttl_seconds: int = 7 * 24 * 60 * 60  # 7 days
    refresh_token_ttl_seconds: int = 30 * 24 * 60 * 60  # 30 days

    log_file: str = "backend.log"

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"


load_dotenv()
settings = Config()
