from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    target_dir: Path = Path(".")
    host: str = "127.0.0.1"
    port: int = 5420
    debug: bool = False

    class Config:
        env_file = ".env"
        env_prefix = "WRANGLER_"
