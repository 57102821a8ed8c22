"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_list, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .proxy import ForwardProxyConfig, get_forward_proxy_config
from .relay import RelayConfig, get_relay_config
from .sources import DEFAULT_SOURCES, get_source_spec, get_source_specs, source_names
from .storage import StorageConfig, get_storage_config
from .telegram import TelegramConfig, get_telegram_config

__all__ = [
    "DEFAULT_SOURCES",
    "ConfigurationError",
    "ForwardProxyConfig",
    "MissingConfigurationError",
    "RateLimit",
    "RelayConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "TelegramConfig",
    "env_float",
    "env_list",
    "get_forward_proxy_config",
    "get_relay_config",
    "get_source_spec",
    "get_source_specs",
    "get_storage_config",
    "get_telegram_config",
    "optional_env_var",
    "require_env_vars",
    "source_names",
]
