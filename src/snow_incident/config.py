"""Configuration models for the ServiceNow table client."""
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

_SCHEMES = ("https://", "http://")


class Credential(BaseModel):
    """Basic authentication credentials for one call."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: SecretStr


class ServiceNowEndpoint(BaseModel):
    """Host of a ServiceNow instance, e.g. ``dev12345.service-now.com``."""

    model_config = ConfigDict(frozen=True)

    base_uri: str = Field(..., description="Instance host name, without scheme")

    @field_validator("base_uri")
    @classmethod
    def _normalize(cls, value: str) -> str:
        value = value.strip()
        for scheme in _SCHEMES:
            if value.lower().startswith(scheme):
                value = value[len(scheme):]
                break
        value = value.rstrip("/")
        if not value:
            raise ValueError("ServiceNow endpoint must not be empty")
        return value

    @property
    def api_url(self) -> str:
        """Get the Table API URL for the instance."""
        return f"https://{self.base_uri}/api/now/table"


class Settings(BaseSettings):
    """Settings loaded from SERVICENOW_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="SERVICENOW_", env_file=".env", extra="ignore")

    instance: str = ""
    username: str = ""
    password: SecretStr = SecretStr("")
    timeout: float = 30.0
    max_retries: int = Field(3, ge=1)
    verify_ssl: bool = True
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None

    def credential(self) -> Credential:
        """Build the per-call credential from settings."""
        if not self.username or not self.password.get_secret_value():
            raise ValueError("SERVICENOW_USERNAME and SERVICENOW_PASSWORD must be set")
        return Credential(username=self.username, password=self.password)

    def endpoint(self) -> ServiceNowEndpoint:
        """Build the instance endpoint from settings."""
        if not self.instance:
            raise ValueError("SERVICENOW_INSTANCE must be set")
        return ServiceNowEndpoint(base_uri=self.instance)
