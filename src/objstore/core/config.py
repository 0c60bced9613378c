"""Configuration management for objstore."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "objstore"

    bucket_name: Optional[str] = None
    base_prefix: str = ""
    region_name: str = "us-east-1"
    endpoint_url: Optional[str] = None
    aws_profile: Optional[str] = None

    # Handed to botocore; this package never retries on its own
    connect_timeout: int = 10
    read_timeout: int = 60
    max_attempts: int = 5

    default_page_size: int = 100
    delimiter: str = Field("/", min_length=1)

    model_config = {
        "env_prefix": "OBJSTORE_",
        "case_sensitive": False,
    }


settings = Settings()
