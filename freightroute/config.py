"""Centralized configuration using Pydantic Settings.

Routing constants, parser defaults and logging settings live here.
Configuration can be overridden via environment variables:
- FRT_ROUTING_BPR_ALPHA=0.15
- FRT_ROUTING_DEFAULT_FREE_SPEED=50
- FRT_PARSER_ENCODING=latin-1
- FRT_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RoutingConfig(BaseSettings):
    """Routing and congestion configuration.

    Environment variables prefixed with FRT_ROUTING_.
    """

    model_config = SettingsConfigDict(env_prefix="FRT_ROUTING_")

    # Bureau of Public Roads volume-delay function: 1 + alpha * (v/c)^beta
    bpr_alpha: float = Field(default=0.15, ge=0.0)
    bpr_beta: float = Field(default=4.0, ge=0.0)

    default_lanes: float = 1.0
    default_saturation_flow: float = 1800.0
    default_free_speed: float = 50.0
    default_cost_factor: float = 1.0


class ParserConfig(BaseSettings):
    """Network file reader configuration.

    Environment variables prefixed with FRT_PARSER_.
    """

    model_config = SettingsConfigDict(env_prefix="FRT_PARSER_")

    encoding: str = "utf-8"
    missing_description: str = "ND"
    default_region: str = "ND Region"


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with FRT_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="FRT_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.routing.bpr_alpha)
        print(config.parser.encoding)

    Environment variables prefixed with FRT_.
    """

    model_config = SettingsConfigDict(env_prefix="FRT_")

    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Apply the observability settings to the root logger.

    Library code only creates loggers; applications call this once at
    startup.

    Args:
        config: Optional override, defaults to get_config().observability.
    """
    config = config or get_config().observability
    logging.basicConfig(level=config.level.upper(), format=config.format, force=True)
