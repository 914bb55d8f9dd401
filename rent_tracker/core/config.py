from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str
    JWT_SECRET: str
    JWT_ALGO: str = "HS256"
    ACCESS_TOKEN_TTL_HOURS: int = 24
    BCRYPT_ROUNDS: int = 12

    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    DB_CONNECT_RETRIES: int = 5
    DB_CREATE_ALL: bool = False

    class Config:
        env_file = ".env"

settings = Settings()
