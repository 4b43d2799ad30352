"""
Configuration settings for the Job Board API
Database, session signing and server options are read from the environment
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Job Board API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database (PostgreSQL in production, SQLite for local development)
    DATABASE_URL: str = "sqlite:///./jobboard.db"

    # Session tokens
    JWT_SECRET: str = "job_portal_secret_key"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24

    # Password hashing cost (bcrypt log rounds)
    BCRYPT_ROUNDS: int = 10

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]

    # Push channel
    WS_REQUIRE_TOKEN: bool = False

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()
