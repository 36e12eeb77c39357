from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    app_name: str = "Chat Store API"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 5000
    allowed_origins: str = "*"

    mongodb_uri: str
    mongo_db_name: str = "chatAppDB"
    chats_collection: str = "chats"
    # empty string disables the Stable API pin
    mongo_server_api_version: str = "1"
    mongo_create_indexes: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins(self) -> List[str]:
        if self.allowed_origins == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

settings = Settings()
