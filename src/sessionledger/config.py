from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str  # mongodb://host:port/dbname, or memory:// for a process-local store
    host: str = "127.0.0.1"
    port: int = 3100
    debug: bool = False
    cors_origins: list[str] = []
    credential_cookie_max_age: int = 365 * 24 * 60 * 60  # long-lived sid
    tracker_cookie_max_age: int = 24 * 60 * 60  # short-lived eid, rotated on evidence change
    bcrypt_rounds: int = 12

    model_config = {
        "env_file": [".env"],
        "env_prefix": "SESSIONLEDGER_",
        "extra": "ignore",
    }
