"""
procurement_config -- single public entrypoint for purchasing configuration.

Responsibility:
    ``get_active_config()`` is the way to obtain a ``PurchasingConfig`` at
    runtime, from a YAML file or from defaults.  Services receive the
    config explicitly; nothing reads files or environment variables on
    its own.

Failure modes:
    - ``FileNotFoundError`` -- the given file does not exist.
    - ``KeyError`` / ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every call emits a ``PROCUREMENT_CONFIG_TRACE`` log entry with the
    source and checksum of the effective settings.
"""

from __future__ import annotations

from pathlib import Path

from procurement_config.loader import (
    compute_checksum,
    load_purchasing_config,
    parse_purchasing_config,
)
from procurement_kernel.logging_config import get_logger
from procurement_modules.purchase.config import PurchasingConfig

_logger = get_logger("config")


def get_active_config(path: Path | str | None = None) -> PurchasingConfig:
    """Load ``path`` if given, else return the default configuration."""
    if path is None:
        config = PurchasingConfig()
        source = "defaults"
    else:
        config = load_purchasing_config(path)
        source = str(path)

    _logger.info(
        "PROCUREMENT_CONFIG_TRACE",
        extra={
            "trace_type": "PROCUREMENT_CONFIG_TRACE",
            "source": source,
            "checksum": compute_checksum(config),
            "currency": config.currency,
            "allocation_method": config.allocation_method.value,
        },
    )
    return config


__all__ = [
    "PurchasingConfig",
    "compute_checksum",
    "get_active_config",
    "load_purchasing_config",
    "parse_purchasing_config",
]
