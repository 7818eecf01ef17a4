from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./pickpath.db"

    # Database Connection Pool Settings
    DB_POOL_SIZE: int = 10  # Base number of connections in pool
    DB_MAX_OVERFLOW: int = 20  # Extra connections allowed beyond pool_size
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for connection from pool
    DB_POOL_RECYCLE: int = 1800  # Recycle connections after 30 minutes

    # App Settings
    APP_NAME: str = "PickPath Labor Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Layout geometry: 1 canvas unit = 1 inch
    INCHES_PER_FOOT: int = 12
    DEFAULT_WALK_SPEED_FPM: float = 264.0  # 3 mph, used for walk-distance minutes

    # Efficiency
    COVERAGE_THRESHOLD_PERCENT: float = 80.0  # Min % of pick days with actual hours

    # Reslotting / ROI
    ROI_HOT_PERCENTILE: float = 0.2  # Top 20% by daily picks
    ROI_FAR_PERCENTILE: float = 0.5  # Top 50% by distance
    ROI_ITEM_LIMIT: int = 50  # Highest-volume items considered

    # Working-day horizons for savings projections
    WORKING_DAYS_PER_WEEK: float = 5
    WORKING_DAYS_PER_MONTH: float = 21.67
    WORKING_DAYS_PER_YEAR: float = 250

    # Walk burden
    TARGET_WALK_PERCENT: float = 35.0  # Walk should stay under 35% of shift

    # Trends
    TREND_HISTORY_LIMIT: int = 60  # Performance records fetched for trends
    TREND_CHART_POINTS: int = 30

    @field_validator('ROI_HOT_PERCENTILE', 'ROI_FAR_PERCENTILE')
    @classmethod
    def validate_percentile(cls, v):
        if not 0 < v < 1:
            raise ValueError("percentile must be between 0 and 1 (exclusive)")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
