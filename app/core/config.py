from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str

    # If DEV and you hit SSL cert issues on a pooled Postgres, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    SESSION_COOKIE_NAME: str = "session"
    BCRYPT_ROUNDS: int = 12

    # --- RATE LIMITING ---
    LOGIN_RATE_LIMIT: str = "10/minute"
    REDIS_URL: str | None = None

    # --- SERVICE REQUESTS ---
    REQUEST_NO_PREFIX: str = "REQ"
    # When true, request detail follows the same scope as the request list
    RESTRICT_REQUEST_DETAIL: bool = False

    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "Super Admin"
    SEED_MASTER_DATA: bool = True
    ENV: str = "dev"  # "dev" or "prod"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
