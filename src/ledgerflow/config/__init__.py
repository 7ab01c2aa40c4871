"""Configuration module for Ledgerflow."""

from ledgerflow.config.logging import component_logger, configure_logging
from ledgerflow.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging", "component_logger"]
