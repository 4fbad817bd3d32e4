from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storefront API (stock + product catalogue)
    STOREFRONT_API_BASE_URL: str = "http://localhost:3333"
    STOREFRONT_API_TIMEOUT: float = 10.0

    # Cart storage
    DATABASE_URL: str = "sqlite+aiosqlite:///./cart.db"
    CART_STORAGE_KEY: str = "@RocketShoes:cart"
    CART_CACHE_SIZE: int = 1024

    # Session
    SESSION_SECRET_KEY: str = "change-me"
    SESSION_MAX_AGE: int = 3600 * 24 * 30

    # Shop Configuration
    SHOP_NAME: str = "RocketShoes"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
