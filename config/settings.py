from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env (local only; deployed environments inject env vars)
load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Store
    DATABASE_URL: Optional[str] = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "postgres"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    STORE_TIMEOUT_SECONDS: float = 5.0

    # Review mutations
    MAX_CONFLICT_RETRIES: int = 3
    CONFLICT_RETRY_BACKOFF_SECONDS: float = 0.02

    # Listing
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    FUZZY_MATCH_THRESHOLD: float = 0.3

    # Cache
    CACHE_ENABLED: bool = True
    REDIS_CACHE_TTL: int = 300
    UPSTASH_REDIS_REST_URL: Optional[str] = None
    UPSTASH_REDIS_REST_TOKEN: Optional[str] = None

    # Identity provider
    FIREBASE_ADMIN_PROJECT_ID: Optional[str] = None
    FIREBASE_ADMIN_CLIENT_EMAIL: Optional[str] = None
    FIREBASE_ADMIN_PRIVATE_KEY: Optional[str] = None

    # HTTP
    FRONTEND_URL: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"
    PORT: int = 8000

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        # Local fallback
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


# instancia global
settings = Settings()
