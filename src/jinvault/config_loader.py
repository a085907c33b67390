"""
Configuration loading and validation for the distributor.
"""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

from jinvault.interfaces.core import DistributionConfig

REQUIRED_FIELDS = [
    "name",
    "rpc_endpoint",
]

# Only required when chain features are enabled
CHAIN_REQUIRED_FIELDS = [
    "private_key",
    "token_mint",
]

CONFIG_VALIDATION_RULES = [
    ("distribution.major_holders_percentage", (int, float), 0, 100, "distribution.major_holders_percentage must be between 0 and 100"),
    ("distribution.medium_holders_percentage", (int, float), 0, 100, "distribution.medium_holders_percentage must be between 0 and 100"),
    ("distribution.buyback_percentage", (int, float), 0, 100, "distribution.buyback_percentage must be between 0 and 100"),
    ("distribution.major_min_percentage", (int, float), 0, 100, "distribution.major_min_percentage must be between 0 and 100"),
    ("distribution.medium_min_percentage", (int, float), 0, 100, "distribution.medium_min_percentage must be between 0 and 100"),
    ("trade.buy_slippage_bps", int, 0, 10_000, "trade.buy_slippage_bps must be between 0 and 10000"),
    ("trade.sell_slippage_bps", int, 0, 10_000, "trade.sell_slippage_bps must be between 0 and 10000"),
    ("trade.curve_slippage_bps", int, 0, 10_000, "trade.curve_slippage_bps must be between 0 and 10000"),
    ("trade.reward_slippage_bps", int, 0, 10_000, "trade.reward_slippage_bps must be between 0 and 10000"),
    ("priority_fees.fixed_amount", int, 0, float("inf"), "priority_fees.fixed_amount must be a non-negative integer"),
    ("priority_fees.extra_percentage", float, 0, 1, "priority_fees.extra_percentage must be between 0 and 1"),
    ("priority_fees.hard_cap", int, 0, float("inf"), "priority_fees.hard_cap must be a non-negative integer"),
    ("retries.max_attempts", int, 1, 100, "retries.max_attempts must be between 1 and 100"),
    ("retries.delay", (int, float), 0, float("inf"), "retries.delay must be a non-negative number"),
    ("jupiter.timeout", (int, float), 0, float("inf"), "jupiter.timeout must be a non-negative number"),
    ("holders.limit", int, 1, 20, "holders.limit must be between 1 and 20"),
    ("schedule.interval", (int, float), 1, float("inf"), "schedule.interval must be at least 1 second"),
    ("admin.session_ttl", (int, float), 1, float("inf"), "admin.session_ttl must be at least 1 second"),
]


def load_config(path: str) -> dict:
    """Load and validate a distributor configuration from a YAML file."""
    with open(path) as f:
        config = yaml.safe_load(f) or {}

    env_file = config.get("env_file")
    if env_file:
        env_path = os.path.join(os.path.dirname(path), env_file)
        if os.path.exists(env_path):
            load_dotenv(env_path, override=True)
        else:
            load_dotenv(env_file, override=True)

    resolve_env_vars(config)
    config.setdefault("enabled", True)

    validate_config(config)
    return config


def resolve_env_vars(config: dict) -> None:
    """Recursively resolve ${VAR} environment references in the configuration."""
    def resolve_env(value):
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            env_value = os.getenv(env_var)
            if env_value is None:
                raise ValueError(f"Environment variable '{env_var}' not found")
            return env_value
        return value

    def resolve_all(d):
        for k, v in d.items():
            if isinstance(v, dict):
                resolve_all(v)
            else:
                d[k] = resolve_env(v)

    resolve_all(config)


def get_nested_value(config: dict, path: str) -> Any:
    """Get a nested value from the configuration using dot notation."""
    keys = path.split(".")
    value = config
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            raise ValueError(f"Missing required config key: {path}")
        value = value[key]
    return value


def validate_config(config: dict) -> None:
    """Validate the configuration against defined rules."""
    for field in REQUIRED_FIELDS:
        get_nested_value(config, field)

    if config.get("enabled", True):
        for field in CHAIN_REQUIRED_FIELDS:
            get_nested_value(config, field)

    for path, expected_type, min_val, max_val, error_msg in CONFIG_VALIDATION_RULES:
        try:
            value = get_nested_value(config, path)

            # bool is an int subclass; never accept it for numeric settings
            if isinstance(value, bool) or not isinstance(value, expected_type):
                raise ValueError(f"Type error: {error_msg}")

            if not (min_val <= value <= max_val):
                raise ValueError(f"Range error: {error_msg}")

        except ValueError as e:
            if str(e).startswith(("Type error:", "Range error:")):
                raise
            continue

    try:
        dynamic = get_nested_value(config, "priority_fees.enable_dynamic")
        fixed = get_nested_value(config, "priority_fees.enable_fixed")
        if dynamic and fixed:
            raise ValueError("Cannot enable both dynamic and fixed priority fees simultaneously")
    except ValueError as e:
        if "Missing required config key" not in str(e):
            raise

    error = get_distribution_config(config).validate()
    if error:
        raise ValueError(error)


def get_distribution_config(config: dict) -> DistributionConfig:
    """Build the distribution split from the `distribution` section, with defaults."""
    section = config.get("distribution") or {}
    defaults = DistributionConfig()
    return DistributionConfig(
        major_holders_percentage=section.get("major_holders_percentage", defaults.major_holders_percentage),
        medium_holders_percentage=section.get("medium_holders_percentage", defaults.medium_holders_percentage),
        buyback_percentage=section.get("buyback_percentage", defaults.buyback_percentage),
        major_min_percentage=section.get("major_min_percentage", defaults.major_min_percentage),
        medium_min_percentage=section.get("medium_min_percentage", defaults.medium_min_percentage),
    )


def print_config_summary(config: dict) -> None:
    """Print a summary of the loaded configuration."""
    print(f"Distributor name: {config.get('name', 'unnamed')}")
    print(f"Chain features: {'enabled' if config.get('enabled', True) else 'disabled'}")
    print(f"Token mint: {config.get('token_mint', 'not configured')}")

    split = get_distribution_config(config)
    print("Distribution split:")
    print(f"  - Major holders (>= {split.major_min_percentage}%): {split.major_holders_percentage}%")
    print(f"  - Medium holders (>= {split.medium_min_percentage}%): {split.medium_holders_percentage}%")
    print(f"  - Buyback: {split.buyback_percentage}%")

    fees = config.get("priority_fees", {})
    print("Priority fees:")
    if fees.get("enable_dynamic"):
        print("  - Dynamic fees enabled")
    elif fees.get("enable_fixed"):
        print(f"  - Fixed fee: {fees.get('fixed_amount', 'not configured')} microlamports")
    else:
        print("  - Built-in per-operation fees")

    print("Configuration loaded successfully!")
