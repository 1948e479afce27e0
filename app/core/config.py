from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    META_WA_VERIFY_TOKEN: str = ""
    META_APP_SECRET: str | None = None
    META_WA_API_VERSION: str = "v20.0"
    META_WA_PHONE_NUMBER_ID: str | None = None
    META_WA_ACCESS_TOKEN: str | None = None
    WHATSAPP_SEND_RETRIES: int = 2
    WHATSAPP_TIMEOUT_SECONDS: float = 10.0

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = False

    # "today" for past-date checks is taken in this timezone
    BOOKING_TIMEZONE: str = "Asia/Kolkata"
    CATALOG_LIST_LIMIT: int = 5
    COLLABORATOR_TIMEOUT_SECONDS: float = 5.0

    DATA_DIR: str = "./data"
    CATALOG_PATH: str | None = None


settings = Settings()
