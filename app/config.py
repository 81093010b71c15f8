from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional

class Settings(BaseSettings):
    # Database - remote ticket store
    db_user: str = Field(default='postgres', alias='WICHTY_DB_USER')
    db_host: str = Field(default='localhost', alias='WICHTY_DB_HOST')
    db_password: str = Field(default='postgres', alias='WICHTY_DB_PASSWORD')
    db_port: int = Field(default=5432, alias='WICHTY_DB_PORT')
    db_name: str = Field(default='wichty', alias='WICHTY_DB_NAME')
    db_pool_min_size: int = Field(default=1, alias='WICHTY_DB_POOL_MIN_SIZE')
    db_pool_max_size: int = Field(default=10, alias='WICHTY_DB_POOL_MAX_SIZE')

    # Offline check-in local storage
    offline_storage_backend: str = Field(default='file', alias='OFFLINE_STORAGE_BACKEND')
    offline_storage_dir: str = Field(default='.wichty-offline', alias='OFFLINE_STORAGE_DIR')

    # Connectivity probe
    connectivity_probe_url: Optional[str] = Field(default=None, alias='CONNECTIVITY_PROBE_URL')
    connectivity_probe_interval: float = Field(default=15.0, alias='CONNECTIVITY_PROBE_INTERVAL')
    connectivity_probe_timeout: float = Field(default=5.0, alias='CONNECTIVITY_PROBE_TIMEOUT')

    # Display language used when a request does not carry one
    default_language: str = Field(default='en', alias='DEFAULT_LANGUAGE')

    # App settings
    environment: str = Field(default="development", alias='APP_ENV')
    port: int = Field(default=8001, alias='FASTAPI_PORT')
    host: str = Field(default="0.0.0.0", alias='FASTAPI_HOST')
    debug: bool = Field(default=True, alias='DEBUG')

    # CORS configuration
    cors_origins: str = Field(default="http://localhost:5173", alias='CORS_ORIGINS')

    # Discord webhooks
    discord_error_webhook_url: Optional[str] = Field(default=None, alias='DISCORD_ERROR_WEBHOOK_URL')

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def db_connection_params(self) -> dict:
        return {
            "host": self.db_host,
            "port": self.db_port,
            "user": self.db_user,
            "password": self.db_password,
            "database": self.db_name,
        }

settings = Settings()
