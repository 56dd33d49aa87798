from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from boughtlist.core.entities import DEFAULT_CURRENCY
from boughtlist.core.normalizer import ZeroPolicy

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True, slots=True)
class BoughtlistConfig:
    """Settings loaded at process startup."""

    export_dir: Path = Path("./exports")
    default_currency: str = DEFAULT_CURRENCY
    zero_policy: ZeroPolicy = ZeroPolicy.PRESERVE
    log_level: str = "INFO"


def load_config_from_env() -> BoughtlistConfig:
    """Load config from env and validate it."""
    export_dir = os.environ.get("BOUGHTLIST_EXPORT_DIR", "./exports").strip()
    if not export_dir:
        raise ValueError("BOUGHTLIST_EXPORT_DIR must not be empty")

    currency = os.environ.get("BOUGHTLIST_DEFAULT_CURRENCY", DEFAULT_CURRENCY).strip()
    if not currency:
        raise ValueError("BOUGHTLIST_DEFAULT_CURRENCY must not be empty")

    zero_policy_value = (
        os.environ.get("BOUGHTLIST_ZERO_POLICY", ZeroPolicy.PRESERVE.value)
        .strip()
        .lower()
    )
    valid_policies = {policy.value for policy in ZeroPolicy}
    if zero_policy_value not in valid_policies:
        raise ValueError(
            "BOUGHTLIST_ZERO_POLICY must be one of: "
            + ", ".join(sorted(valid_policies))
        )

    log_level = os.environ.get("BOUGHTLIST_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(
            "BOUGHTLIST_LOG_LEVEL must be one of: " + ", ".join(sorted(_LOG_LEVELS))
        )

    return BoughtlistConfig(
        export_dir=Path(export_dir),
        default_currency=currency.upper(),
        zero_policy=ZeroPolicy(zero_policy_value),
        log_level=log_level,
    )
