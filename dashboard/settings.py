import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    # Upstream API Configuration
    api_url: str = Field(default="http://localhost:3002", alias="API_URL")
    request_timeout: float = Field(default=30.0, alias="REQUEST_TIMEOUT")

    # Retry Configuration
    retry_attempts: int = Field(default=3, ge=1, alias="RETRY_ATTEMPTS")
    retry_base_delay: float = Field(default=0.1, ge=0, alias="RETRY_BASE_DELAY")

    # Cache Configuration
    cache_max_size: int | None = Field(default=None, ge=1, alias="CACHE_MAX_SIZE")
    cache_debug: bool = Field(default=False, alias="CACHE_DEBUG")
    single_flight: bool = Field(default=False, alias="SINGLE_FLIGHT")

    # Web Server Configuration
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_env(cls) -> "Settings":
        fields = {
            f.alias: os.environ[f.alias]
            for f in cls.model_fields.values()
            if f.alias and os.environ.get(f.alias)
        }
        return cls.model_validate(fields)


global_settings = Settings.from_env()
