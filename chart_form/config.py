"""Configuration for chart-form.

Settings live in `<home>/config.yaml`, where home is
`~/.config/chart-form` unless CHART_FORM_HOME says otherwise.
Environment variables take precedence over the file.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel

HOME_ENV = "CHART_FORM_HOME"
TEMPLATE_REGISTRY_ENV = "CHART_FORM_TEMPLATE_REGISTRY"
LOG_LEVEL_ENV = "CHART_FORM_LOG_LEVEL"


class GlobalConfig(BaseModel):
    """Contents of config.yaml."""

    default_template_registry_path: str | None = None
    log_level: str = "WARNING"


def get_chart_form_home() -> Path:
    """Directory holding config.yaml and the default registry."""
    env_path = os.environ.get(HOME_ENV)
    if env_path:
        return Path(env_path)
    return Path.home() / ".config" / "chart-form"


def load_global_config() -> GlobalConfig:
    """Load config.yaml, or defaults if there is none."""
    config_path = get_chart_form_home() / "config.yaml"
    if not config_path.exists():
        return GlobalConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    return GlobalConfig.model_validate(data)


def get_template_registry_path() -> Path:
    """Resolve the template registry path.

    Precedence: CHART_FORM_TEMPLATE_REGISTRY, then config.yaml, then
    `<home>/registry/template-registry`.
    """
    env_path = os.environ.get(TEMPLATE_REGISTRY_ENV)
    if env_path:
        return Path(env_path)

    config = load_global_config()
    if config.default_template_registry_path:
        return Path(config.default_template_registry_path)

    return get_chart_form_home() / "registry" / "template-registry"


def get_log_level() -> str:
    """Resolve the log level name."""
    return os.environ.get(LOG_LEVEL_ENV) or load_global_config().log_level
