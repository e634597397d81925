"""Configuration management."""

from hookflow.config.settings import BlockingHookConfig, SessionGateConfig, Settings

__all__ = ["BlockingHookConfig", "SessionGateConfig", "Settings"]
