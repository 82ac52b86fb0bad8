"""
Report settings - YAML defaults with environment overrides.
Environment values (including a local .env file) win over the YAML file.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml
from dotenv import load_dotenv

from pipeline.risk_report_dag import RiskReportConfig

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / 'config' / 'risk_report.yml'

# Environment variable -> (config key, converter)
ENV_OVERRIDES = {
    'RISK_FREE_RATE': ('risk_free_annual', float),
    'LOOKBACK_DAYS': ('lookback_days', int),
    'REPORT_OUTPUT_DIR': ('output_dir', Path),
    'FETCH_TIMEOUT_S': ('fetch_timeout', float),
    'FETCH_RETRIES': ('fetch_retries', int),
}


class SettingsError(Exception):
    """Raised when report settings cannot be loaded."""
    pass


def load_settings_file(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the raw YAML settings.

    Args:
        config_path: Path to YAML file (default RISK_REPORT_CONFIG or config/risk_report.yml)

    Returns:
        Flattened settings dictionary using RiskReportConfig field names

    Raises:
        SettingsError: If the file is missing or malformed
    """
    if config_path is None:
        config_path = os.getenv('RISK_REPORT_CONFIG', str(DEFAULT_CONFIG_PATH))

    config_file = Path(config_path)
    if not config_file.exists():
        raise SettingsError(f"Report config file not found: {config_path}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"Failed to parse report config {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise SettingsError("Report config must be a mapping")

    if 'tickers' not in raw or 'benchmark' not in raw:
        raise SettingsError("Report config requires 'tickers' and 'benchmark'")

    settings = {k: v for k, v in raw.items() if k != 'fetch'}
    fetch = raw.get('fetch') or {}
    if 'timeout_s' in fetch:
        settings['fetch_timeout'] = fetch['timeout_s']
    if 'retries' in fetch:
        settings['fetch_retries'] = fetch['retries']
    if 'output_dir' in settings:
        settings['output_dir'] = Path(settings['output_dir'])

    return settings


def apply_env_overrides(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of settings with environment overrides applied."""
    result = dict(settings)
    for env_name, (key, convert) in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value is None or value == '':
            continue
        try:
            result[key] = convert(value)
        except ValueError as e:
            raise SettingsError(f"Invalid value for {env_name}: {value!r}") from e
        logger.info(f"Setting {key} overridden by {env_name}")
    return result


def load_config(config_path: Optional[str] = None, **overrides: Any) -> RiskReportConfig:
    """
    Build the run configuration: YAML file, then environment, then explicit overrides.

    Args:
        config_path: Optional YAML path
        **overrides: Field values that take precedence (None values are ignored)

    Returns:
        Validated RiskReportConfig

    Raises:
        SettingsError: If loading or validation fails
    """
    settings = apply_env_overrides(load_settings_file(config_path))
    settings.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return RiskReportConfig(**settings)
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Invalid report configuration: {e}") from e
