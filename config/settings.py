# config/settings.py
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "PixelBridge"
    VERSION: str = "1.0.0"

    # Facebook Pixel credentials - the service refuses to start without them
    FACEBOOK_PIXEL_ID: str = Field(..., min_length=1)
    FACEBOOK_ACCESS_TOKEN: str = Field(..., min_length=1)

    # Secret echoed back by the platform during the GET verification handshake
    WEBHOOK_VERIFY_TOKEN: Optional[str] = None

    # Events sent with a test code show up under "Test Events" in Events Manager
    TEST_EVENT_CODE: Optional[str] = None

    GRAPH_API_BASE_URL: str = "https://graph.facebook.com"
    GRAPH_API_VERSION: str = "v18.0"

    DEFAULT_CURRENCY: str = "BRL"

    # Fixed window limiter applied to the /webhook routes, per caller IP
    RATE_LIMIT_WINDOW_SECONDS: int = Field(15 * 60, gt=0)
    RATE_LIMIT_MAX_REQUESTS: int = Field(100, gt=0)

    MAX_BODY_BYTES: int = 10 * 1024 * 1024

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra='ignore', frozen=True)

    @property
    def events_endpoint(self) -> str:
        return f"{self.GRAPH_API_BASE_URL.rstrip('/')}/{self.GRAPH_API_VERSION}/{self.FACEBOOK_PIXEL_ID}/events"


@lru_cache
def get_settings() -> Settings:
    """Loads the settings once per process. Raises pydantic.ValidationError if credentials are missing."""
    return Settings()


if __name__ == "__main__":
    settings = get_settings()
    print(f"Project Name: {settings.PROJECT_NAME}")
    print(f"Pixel ID Loaded: {'Yes' if settings.FACEBOOK_PIXEL_ID else 'No'}")
    print(f"Verify Token Loaded: {'Yes' if settings.WEBHOOK_VERIFY_TOKEN else 'No'}")
    print(f"Events Endpoint: {settings.events_endpoint}")
