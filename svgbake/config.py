"""Application configuration from environment variables."""

from __future__ import annotations

from decimal import Decimal

from pydantic import model_validator
from pydantic_settings import BaseSettings

from svgbake.engine.config import EngineConfig, FlattenOptions
from svgbake.engine.numeric import EPSILON, VERIFICATION_TOLERANCE


class Settings(BaseSettings):
    svgbake_env: str = "development"
    svgbake_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Numeric engine
    svgbake_precision: int = 80
    # Max error at which API responses report a result as verified
    svgbake_verification_tolerance: Decimal = VERIFICATION_TOLERANCE

    # Flattening defaults
    svgbake_dpi: int = 96
    svgbake_output_precision: int = 6
    svgbake_e2e_tolerance: float = 1e-3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_numeric(self) -> Settings:
        if self.svgbake_verification_tolerance < EPSILON:
            raise ValueError(f"svgbake_verification_tolerance must not be smaller than the engine epsilon {EPSILON}")
        if self.svgbake_precision < 20:
            raise ValueError("svgbake_precision must be at least 20 digits")
        return self

    def engine_config(self) -> EngineConfig:
        return EngineConfig(precision=self.svgbake_precision)

    def flatten_options(self) -> FlattenOptions:
        return FlattenOptions(
            precision=self.svgbake_output_precision,
            e2e_tolerance=self.svgbake_e2e_tolerance,
            dpi=self.svgbake_dpi,
        )

    def is_verified(self, max_error: Decimal) -> bool:
        return max_error < self.svgbake_verification_tolerance


settings = Settings()
