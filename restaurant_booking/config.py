from fastapi_mail import ConnectionConfig
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./bookings.db"

    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "bookings@example.com"
    MAIL_FROM_NAME: str = "Restaurant Booking"
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    MAIL_SUPPRESS_SEND: bool = False

    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow"
    )


settings = Settings()


def mail_config(cfg: Settings = settings) -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=cfg.MAIL_USERNAME,
        MAIL_PASSWORD=cfg.MAIL_PASSWORD,
        MAIL_FROM=cfg.MAIL_FROM,
        MAIL_FROM_NAME=cfg.MAIL_FROM_NAME,
        MAIL_PORT=cfg.MAIL_PORT,
        MAIL_SERVER=cfg.MAIL_SERVER,
        MAIL_STARTTLS=cfg.MAIL_STARTTLS,
        MAIL_SSL_TLS=cfg.MAIL_SSL_TLS,
        USE_CREDENTIALS=bool(cfg.MAIL_USERNAME),
        SUPPRESS_SEND=int(cfg.MAIL_SUPPRESS_SEND),
    )
