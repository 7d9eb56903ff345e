"""Loading of the payroll parameters shipped in ``piecework/config``."""

from __future__ import annotations

import os
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

import yaml

from piecework.core.schema import ContributionSplit, PayrollConfig

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "payroll.yaml"

DEFAULT_MILK_TASK_ID = 37
DEFAULT_MEAL_TASK_ID = 47
DEFAULT_COMBINED_RATE = Decimal("0.0674")
DEFAULT_CNSS_RATE = Decimal("0.0448")
DEFAULT_AMO_RATE = Decimal("0.0226")
DEFAULT_UNRESOLVED_CATEGORY = "À METTRE À JOUR"


def _config_path() -> Path:
    env_path = os.getenv("PIECEWORK_CONFIG")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return DEFAULT_CONFIG_PATH


@lru_cache(maxsize=None)
def load_settings() -> dict:
    path = _config_path()
    if not path.exists():
        return {"task_groups": []}
    with path.open("r", encoding="utf-8") as fp:
        return yaml.safe_load(fp) or {}


def reset_settings() -> None:
    """Forget the cached YAML so the next call re-reads it (used in tests)."""

    load_settings.cache_clear()


def milk_task_id() -> int:
    return int(load_settings().get("allowances", {}).get("milk_task_id", DEFAULT_MILK_TASK_ID))


def meal_task_id() -> int:
    return int(load_settings().get("allowances", {}).get("meal_task_id", DEFAULT_MEAL_TASK_ID))


def unresolved_category() -> str:
    return str(load_settings().get("unresolved_category") or DEFAULT_UNRESOLVED_CATEGORY)


def _rate(key: str, default: Decimal) -> Decimal:
    value = load_settings().get("contributions", {}).get(key)
    return Decimal(str(value)) if value is not None else default


def combined_config() -> PayrollConfig:
    """Parameters of the reports that withhold a single CNSS+AMO rate."""

    return PayrollConfig(
        contribution_rate=_rate("combined_rate", DEFAULT_COMBINED_RATE),
        milk_task_id=milk_task_id(),
        meal_task_id=meal_task_id(),
    )


def split_config() -> PayrollConfig:
    """Parameters of the detailed payroll, where CNSS and AMO are listed apart."""

    return PayrollConfig(
        contribution_rate=ContributionSplit(
            cnss_rate=_rate("cnss_rate", DEFAULT_CNSS_RATE),
            amo_rate=_rate("amo_rate", DEFAULT_AMO_RATE),
        ),
        milk_task_id=milk_task_id(),
        meal_task_id=meal_task_id(),
    )
