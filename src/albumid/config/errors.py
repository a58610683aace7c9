"""Errors raised while reading settings from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but unusable (unparsable or out of range)."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""
