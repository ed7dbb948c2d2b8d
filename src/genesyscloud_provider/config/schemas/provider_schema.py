"""Genesys Cloud provider configuration schema."""
from typing import Dict, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator

REGION_DOMAINS: Dict[str, str] = {
    "us-east-1": "mypurecloud.com",
    "us-east-2": "use2.us-gov-pure.cloud",
    "us-west-2": "usw2.pure.cloud",
    "ca-central-1": "cac1.pure.cloud",
    "sa-east-1": "sae1.pure.cloud",
    "eu-central-1": "mypurecloud.de",
    "eu-central-2": "euc2.pure.cloud",
    "eu-west-1": "mypurecloud.ie",
    "eu-west-2": "euw2.pure.cloud",
    "ap-south-1": "aps1.pure.cloud",
    "ap-northeast-1": "mypurecloud.jp",
    "ap-northeast-2": "apne2.pure.cloud",
    "ap-northeast-3": "apne3.pure.cloud",
    "ap-southeast-2": "mypurecloud.com.au",
    "me-central-1": "mec1.pure.cloud",
}


class ProviderConfig(BaseModel):
    """Connection settings for the Genesys Cloud platform API."""

    oauthclient_id: str = Field("", description="OAuth client credentials ID")
    oauthclient_secret: SecretStr = Field(SecretStr(""), description="OAuth client credentials secret")
    aws_region: str = Field("us-east-1", description="AWS region the organization is hosted in")
    api_url: Optional[str] = Field(None, description="Override for the API base URL")
    token_pool_size: int = Field(10, description="Number of API clients in the pool")
    request_timeout: float = Field(30.0, description="HTTP request timeout in seconds")
    max_retries: int = Field(3, description="Transport retries for throttled or unavailable responses")
    retry_base_delay: float = Field(1.0, description="Base delay for transport retry backoff")
    sdk_debug: bool = Field(False, description="Log every HTTP request and response status")

    @field_validator("aws_region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        """Validate region."""
        if v.lower() not in REGION_DOMAINS:
            raise ValueError(f"Region must be one of {sorted(REGION_DOMAINS)}")
        return v.lower()

    @field_validator("token_pool_size")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        """Validate pool size."""
        if v < 1 or v > 20:
            raise ValueError("Token pool size must be between 1 and 20")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0 or v > 10:
            raise ValueError("Max retries must be between 0 and 10")
        return v

    @field_validator("request_timeout", "retry_base_delay")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @property
    def domain(self) -> str:
        return REGION_DOMAINS[self.aws_region]

    @property
    def base_url(self) -> str:
        """API base URL, honouring the override."""
        if self.api_url:
            return self.api_url.rstrip("/")
        return f"https://api.{self.domain}"

    @property
    def login_url(self) -> str:
        return f"https://login.{self.domain}"

    def has_credentials(self) -> bool:
        return bool(self.oauthclient_id and self.oauthclient_secret.get_secret_value())
