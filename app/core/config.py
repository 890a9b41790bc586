from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_EXTRACT: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_EXTRACT: float = 0.0

    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str | None = None
    WHATSAPP_ACCESS_TOKEN: str | None = None
    WHATSAPP_PHONE_NUMBER_ID: str | None = None
    WHATSAPP_GRAPH_API_VERSION: str = "v20.0"

    HUBSPOT_ACCESS_TOKEN: str | None = None
    HUBSPOT_BASE_URL: str = "https://api.hubapi.com"

    BUSINESS_NAME: str = "Glamour Hair Studio"
    BUSINESS_TIMEZONE: str = "Africa/Johannesburg"
    CURRENCY_SYMBOL: str = "R"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = False

    SLOT_STEP_MINUTES: int = 30
    BOOKING_BUFFER_MINUTES: int = 15

    HISTORY_LIMIT: int = 30
    CONVERSATION_RETENTION_HOURS: int = 24
    CONVERSATION_SWEEP_INTERVAL_SECONDS: int = 300


settings = Settings()
