"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Secure defaults (no backend keys in code)
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from neowatch.services.results import configure_logging
from neowatch.services.vital_monitor import VitalMonitorConfig

# Load environment variables from .env file
load_dotenv()


class BackendConfig(BaseModel):
    """Hosted backend (PostgREST data API + GoTrue identity API) settings."""

    url: str = Field(..., description="Project URL, e.g. https://xyz.supabase.co")
    anon_key: str = Field(..., description="Public anonymous API key")
    timeout_seconds: float = Field(default=10.0, gt=0.0, description="HTTP request timeout")

    @field_validator("url")
    def validate_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("Backend URL must start with http:// or https://")
        return v

    @field_validator("anon_key")
    def validate_anon_key(cls, v: str) -> str:
        if not v or v == "your-anon-key-here":
            raise ValueError("Backend anon key must be set in environment or .env file")
        return v


class SimulatorConfig(BaseModel):
    """Simulated sensor cadence and history window."""

    tick_interval_seconds: float = Field(
        default=3.0, gt=0.0, description="Interval between simulated readings"
    )
    history_size: int = Field(default=24, gt=0, description="Points kept in the rolling history")
    seed_interval_minutes: float = Field(
        default=30.0, gt=0.0, description="Spacing of pre-seeded history points"
    )
    relative_time_refresh_seconds: float = Field(
        default=30.0, gt=0.0, description="Refresh interval for 'N min ago' labels"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    backend: BackendConfig
    simulator: SimulatorConfig
    logging: LoggingConfig

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    backend_config = BackendConfig(
        url=os.getenv("SUPABASE_URL", ""),
        anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
        timeout_seconds=float(os.getenv("BACKEND_TIMEOUT_SECONDS", "10.0")),
    )

    simulator_config = SimulatorConfig(
        tick_interval_seconds=float(os.getenv("TICK_INTERVAL_SECONDS", "3.0")),
        history_size=int(os.getenv("HISTORY_SIZE", "24")),
        seed_interval_minutes=float(os.getenv("SEED_INTERVAL_MINUTES", "30.0")),
        relative_time_refresh_seconds=float(os.getenv("RELATIVE_TIME_REFRESH_SECONDS", "30.0")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        backend=backend_config,
        simulator=simulator_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"Configuration loaded for {config.environment} environment")
        print(f"Backend: {config.backend.url}")
    except Exception as e:
        print(f"Configuration validation failed: {e}")
        raise


def setup_logging(config: AppConfig | None = None) -> None:
    """Apply the logging section: stdlib level plus console or JSON rendering."""
    config = config or get_config()
    configure_logging(config.logging.level, config.logging.format)


def get_monitor_config() -> VitalMonitorConfig:
    """Build the simulator configuration from the application settings."""
    simulator = get_config().simulator
    return VitalMonitorConfig(
        tick_interval_seconds=simulator.tick_interval_seconds,
        history_size=simulator.history_size,
        seed_interval_minutes=simulator.seed_interval_minutes,
    )


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\nBACKEND")
    print(f"URL: {config.backend.url}")
    print(f"Timeout: {config.backend.timeout_seconds}s")

    print("\nSIMULATOR")
    print(f"Tick Interval: {config.simulator.tick_interval_seconds}s")
    print(f"History Size: {config.simulator.history_size}")
    print(f"Relative Time Refresh: {config.simulator.relative_time_refresh_seconds}s")


if __name__ == "__main__":
    validate_config()
    print_config_summary()
