from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "VisionPlan Scheduling Engine"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["console", "json"] = "console"

    # Resources
    DEFAULT_RESOURCE_CAPACITY: float = Field(default=8.0, ge=0)

    # Calendar day-stepping stops after this many days (10 years)
    CALENDAR_SEARCH_HORIZON_DAYS: int = Field(default=3660, gt=0)

    # Constraint violations larger than this are errors, otherwise warnings
    CONSTRAINT_ERROR_THRESHOLD_DAYS: int = 7

    # Resource leveling
    LEVELING_MAX_ITERATIONS: int = Field(default=100, ge=0)

    # Scenario metrics and comparison
    SCENARIO_COST_PER_TASK_DAY: float = 100.0
    SCENARIO_RESOURCE_UTILIZATION: float = 75.0
    SCENARIO_CRITICAL_DURATION_DELTA_DAYS: int = 7
    SCENARIO_CRITICAL_COST_DELTA: float = 10000.0
    SCENARIO_CRITICAL_RISK_DELTA: float = 10.0
    SCENARIO_HIGH_RISK_THRESHOLD: float = 60.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_local(self) -> bool:
        return self.ENVIRONMENT == "local"


settings = Settings()
