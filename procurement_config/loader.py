"""
Configuration Loader (``procurement_config.loader``).

Responsibility
--------------
Loads a purchasing YAML file and parses it into a
``PurchasingConfig`` dataclass.  Runtime callers go through
``procurement_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Sits above the kernel and
engines; the kernel MUST NEVER import from ``procurement_config``.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; unknown keys are rejected rather than ignored.
* ``compute_checksum`` is a deterministic SHA-256 of the parsed settings.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key  -> ``KeyError``.
* Wrong value type or invalid value  -> ``ValueError``.

YAML shape::

    purchasing:
      currency: INR
      allocation_method: per_unit
      bill_number_prefix: PB
      reference_required_modes: [bank_transfer, upi, cheque]
      default_payment_mode: cash
      unknown_vendor_name: Unknown Vendor
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from procurement_modules.purchase.config import PurchasingConfig

_SECTION = "purchasing"

_ALLOWED_KEYS = frozenset(f.name for f in dataclasses.fields(PurchasingConfig))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return data


def parse_purchasing_config(data: dict[str, Any]) -> PurchasingConfig:
    """
    Build a ``PurchasingConfig`` from a parsed YAML mapping.

    Accepts either the settings themselves or a mapping with a single
    ``purchasing`` section.  Missing keys keep their defaults.

    Raises:
        KeyError: if an unknown key is present.
        ValueError: if a value has the wrong shape or is invalid.
    """
    if _SECTION in data:
        extra = set(data) - {_SECTION}
        if extra:
            raise KeyError(f"Unknown top-level config keys: {sorted(extra)}")
        data = data[_SECTION] or {}
        if not isinstance(data, dict):
            raise ValueError(f"'{_SECTION}' must be a mapping")

    unknown = set(data) - _ALLOWED_KEYS
    if unknown:
        raise KeyError(
            f"Unknown purchasing config keys: {sorted(unknown)}; "
            f"allowed: {sorted(_ALLOWED_KEYS)}"
        )

    kwargs = dict(data)
    if "reference_required_modes" in kwargs:
        modes = kwargs["reference_required_modes"]
        if not isinstance(modes, (list, tuple)):
            raise ValueError("reference_required_modes must be a list of payment modes")
        kwargs["reference_required_modes"] = frozenset(modes)
    for key in ("currency", "bill_number_prefix", "unknown_vendor_name"):
        if key in kwargs and not isinstance(kwargs[key], str):
            raise ValueError(f"{key} must be a string, got {kwargs[key]!r}")

    return PurchasingConfig(**kwargs)


def load_purchasing_config(path: Path | str) -> PurchasingConfig:
    """Load and parse a purchasing YAML file."""
    return parse_purchasing_config(load_yaml_file(Path(path)))


def compute_checksum(config: PurchasingConfig) -> str:
    """Deterministic SHA-256 of the effective settings."""
    canonical = {
        "currency": config.currency,
        "allocation_method": config.allocation_method.value,
        "bill_number_prefix": config.bill_number_prefix,
        "reference_required_modes": sorted(m.value for m in config.reference_required_modes),
        "default_payment_mode": config.default_payment_mode.value,
        "unknown_vendor_name": config.unknown_vendor_name,
    }
    payload = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
