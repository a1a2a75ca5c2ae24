from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    APP_NAME: str = Field("RAJJ API", env="APP_NAME")
    ENV: str = Field("dev", env="ENV")
    HOST: str = Field("0.0.0.0", env="HOST")
    PORT: int = Field(3000, env="PORT")
    DEBUG: bool = Field(False, env="DEBUG")
    LOG_DIR: Path = Field(BASE_DIR / "logs", env="LOG_DIR")
    JWT_SECRET: str = Field("change-me", env="JWT_SECRET")
    JWT_ALGORITHM: str = Field("HS256", env="JWT_ALGORITHM")
    JWT_EXPIRES_MINUTES: int = Field(10, env="JWT_EXPIRES_MINUTES")
    MAX_LOGIN_ATTEMPTS: int = Field(5, env="MAX_LOGIN_ATTEMPTS")
    LOGIN_BLOCK_SECONDS: int = Field(5 * 60, env="LOGIN_BLOCK_SECONDS")
    TRUST_PROXY_HEADERS: bool = Field(False, env="TRUST_PROXY_HEADERS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
