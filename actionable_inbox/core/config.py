from pydantic_settings import BaseSettings
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = "sqlite:///./todo.db"
    SQL_ECHO: bool = False

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Boundary settings
    CORS_ORIGIN: str = "http://localhost:3000"
    MAX_BODY_BYTES: int = 10 * 1024 * 1024
    RATE_LIMIT_MAX: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # Project settings
    PROJECT_NAME: str = "Actionable Inbox API"
    API_PREFIX: str = "/api"

    class Config:
        env_file = ".env"
        # Variables in .env that aren't defined here are simply ignored.
        extra = "ignore"

settings = Settings()
