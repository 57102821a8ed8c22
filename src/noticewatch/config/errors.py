"""Errors raised while reading noticewatch settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable, or names an unknown source."""


class MissingConfigurationError(ConfigurationError):
    """Required environment variables are unset or blank."""
