"""
Configuration for Taoli Tools Signer
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Settings for signing service"""

    # Environment
    environment: str = "production"

    # Keychain source (TOML)
    # KEYCHAIN holds the TOML text itself and wins over the file
    keychain: str | None = None
    keychain_file: str = "keychain.toml"

    # Server
    host: str = "0.0.0.0"
    port: int = 12250

    # Browser origins (comma-separated). Advisory only, NOT a security boundary
    cors_origins: str = "http://localhost:5173,https://taoli.tools"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def get_cors_origins_list(self) -> List[str]:
        """
        Get allowed CORS origins

        Returns:
            List of origins (empty list = no cross-origin access)
        """
        if not self.cors_origins or self.cors_origins.strip() == "":
            return []

        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
