from decouple import config, Csv

class Settings:
    # Database Configuration
    DATABASE_URL: str = config("DATABASE_URL", default="sqlite:///./dronemed.db")

    # Security Configuration
    SECRET_KEY: str = config("SECRET_KEY", default="change-me-in-production")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = config("ACCESS_TOKEN_EXPIRE_MINUTES", default=24 * 60, cast=int)

    # Delivery estimates
    DEFAULT_DISTANCE_KM: float = config("DEFAULT_DISTANCE_KM", default=25.0, cast=float)
    ETA_BASE_MINUTES: float = config("ETA_BASE_MINUTES", default=30.0, cast=float)
    ETA_MINUTES_PER_KM: float = config("ETA_MINUTES_PER_KM", default=2.0, cast=float)

    # Drone battery
    BATTERY_DRAIN_MIN: int = config("BATTERY_DRAIN_MIN", default=5, cast=int)
    BATTERY_DRAIN_MAX: int = config("BATTERY_DRAIN_MAX", default=15, cast=int)
    BATTERY_FLOOR: int = config("BATTERY_FLOOR", default=10, cast=int)

    # URL Configuration
    CORS_ORIGINS: list = config(
        "CORS_ORIGINS",
        default="http://localhost:3000,http://localhost:5173",
        cast=Csv()
    )

    # Environment
    DEBUG: bool = config("DEBUG", default=True, cast=bool)

    # Logging
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

settings = Settings()
