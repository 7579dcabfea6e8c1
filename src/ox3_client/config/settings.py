"""Configuration settings for the OX3 API client.

Settings are loaded from ``OX3_``-prefixed environment variables and an
optional ``.env`` file. They either carry the credentials directly or
point at a JSON credentials file (see :mod:`ox3_client.config.loader`).
"""

from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models import Credentials


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    :param domain: OX3 UI host (``OX3_DOMAIN``)
    :type domain: str
    :param realm: OAuth realm (``OX3_REALM``)
    :type realm: str
    :param consumer_key: OAuth1 consumer key (``OX3_CONSUMER_KEY``)
    :type consumer_key: str
    :param consumer_secret: OAuth1 consumer secret (``OX3_CONSUMER_SECRET``,
        ``OX3_CONSUMER_SECRECT`` also accepted)
    :type consumer_secret: str
    :param email: Account email (``OX3_EMAIL``)
    :type email: str
    :param password: Account password (``OX3_PASSWORD``)
    :type password: str
    :param config_file: Path of a JSON credentials file; takes precedence
        over the individual credential fields (``OX3_CONFIG_FILE``)
    :type config_file: Optional[str]
    :param debug: Emit handshake trace events (``OX3_DEBUG``)
    :type debug: bool
    :param log_level: Logging level (``OX3_LOG_LEVEL``)
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="OX3_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
        populate_by_name=True,
    )

    domain: str = Field("", description="OX3 UI host")
    realm: str = Field("", description="OAuth realm")
    consumer_key: str = Field("", description="OAuth1 consumer key")
    consumer_secret: str = Field(
        "",
        validation_alias=AliasChoices("OX3_CONSUMER_SECRET", "OX3_CONSUMER_SECRECT"),
        description="OAuth1 consumer secret",
    )
    email: str = Field("", description="Account email")
    password: str = Field("", repr=False, description="Account password")

    config_file: Optional[str] = Field(
        None, description="Path to a JSON credentials file"
    )

    debug: bool = Field(False, description="Emit handshake trace events")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    def to_credentials(self) -> Credentials:
        """Build :class:`Credentials` from the individual credential fields.

        :return: Credentials (not yet validated)
        :rtype: Credentials
        """
        return Credentials(
            domain=self.domain,
            realm=self.realm,
            consumer_key=self.consumer_key,
            consumer_secret=self.consumer_secret,
            email=self.email,
            password=self.password,
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
