"""Configuration loading from YAML files with environment variable support."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import dotenv_values

from .core.exceptions import ConfigurationError

logger = logging.getLogger("gembridge")

# Default path to the config file (relative to project root)
DEFAULT_CONFIG_PATH = "configs/config_default.yaml"

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_API_VERSION = "v1beta"
DEFAULT_API_CLIENT = "genai-js/0.21.0"
DEFAULT_MODEL = "gemini-1.5-pro-latest"
DEFAULT_EMBEDDINGS_MODEL = "text-embedding-004"
DEFAULT_MODEL_PREFIXES = ("gemini-", "learnlm-")
DEFAULT_TIMEOUT = 60.0

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class BridgeSettings:
    """Resolved runtime settings; every field has a working default."""

    base_url: str = DEFAULT_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    api_client: str = DEFAULT_API_CLIENT
    timeout_seconds: float = DEFAULT_TIMEOUT
    api_key: Optional[str] = None
    default_model: str = DEFAULT_MODEL
    default_embeddings_model: str = DEFAULT_EMBEDDINGS_MODEL
    model_prefixes: tuple[str, ...] = field(default=DEFAULT_MODEL_PREFIXES)
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"

    @property
    def api_base(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.api_version}"


def resolve_config_path(path: str) -> Path:
    """Resolve config path relative to project root if needed."""
    if Path(path).is_absolute():
        return Path(path)
    project_root = Path(__file__).parent.parent
    return project_root / path


def resolve_env_path(config_path: Path) -> Path:
    """Resolve the .env file that sits next to a config file."""
    return config_path.with_name(".env")


def load_env_values(env_path: Path) -> dict[str, str]:
    """Load environment values from a .env file without mutating os.environ."""
    if not env_path.exists():
        return {}
    raw_values = dotenv_values(env_path)
    return {key: value for key, value in raw_values.items() if value is not None}


def load_config(path: str | None = None, substitute_env: bool = True) -> dict:
    """Load configuration from a YAML file.

    Args:
        path: Path to the config file. Defaults to GEMBRIDGE_CONFIG,
              or configs/config_default.yaml in the project root.
        substitute_env: Whether to substitute environment variables in the config.

    Returns:
        Parsed configuration dictionary.

    Raises:
        ConfigurationError: If the file does not exist or is not a mapping.
    """
    if path is None:
        path = os.getenv("GEMBRIDGE_CONFIG") or DEFAULT_CONFIG_PATH

    config_path = resolve_config_path(path)

    logger.info(f"Loading configuration from {config_path}")

    if not config_path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise ConfigurationError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {config_path}")

    if substitute_env:
        env_file = resolve_env_path(config_path)
        env_values = load_env_values(env_file)
        if env_values:
            logger.info(f"Loading environment variables from {env_file}")
        data = _substitute_env_vars(data, env_values)

    logger.info(f"Configuration loaded successfully from {config_path}")
    return data


def _substitute_env_vars(
    obj: Any, env_values: Mapping[str, str] | None = None
) -> Any:
    """Recursively substitute ${VAR_NAME} and $VAR_NAME in string values.

    Unset variables leave the placeholder in place and log a warning.
    """
    env_values = env_values or {}

    if isinstance(obj, dict):
        return {k: _substitute_env_vars(v, env_values) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_substitute_env_vars(item, env_values) for item in obj]
    if isinstance(obj, str):

        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            value = env_values.get(var_name)
            if value is None:
                value = os.getenv(var_name)
            if value is None:
                logger.warning(
                    f"CONFIG ERROR: Environment variable '${var_name}' is not set! "
                    f"The literal placeholder will be used."
                )
                return match.group(0)
            return value

        return _ENV_PATTERN.sub(replace_var, obj)
    return obj


def _get(cfg: Mapping[str, Any], *keys: str):
    cur: Any = cfg
    for key in keys:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_str(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def load_settings(config: Mapping[str, Any] | None = None) -> BridgeSettings:
    """Build BridgeSettings from a parsed config dict.

    GEMBRIDGE_HOST and GEMBRIDGE_PORT take priority over the config file.
    """
    cfg = config or {}
    defaults = BridgeSettings()

    api_key = _to_str(_get(cfg, "upstream_settings", "api_key"))
    if api_key and _ENV_PATTERN.fullmatch(api_key):
        # Unresolved placeholder: treat as not configured
        api_key = None

    prefixes = _get(cfg, "model_settings", "model_prefixes")
    if isinstance(prefixes, (list, tuple)):
        model_prefixes = tuple(str(p) for p in prefixes if p)
    else:
        model_prefixes = defaults.model_prefixes

    host = os.getenv("GEMBRIDGE_HOST") or _to_str(_get(cfg, "proxy_settings", "server", "host"))
    port = _to_int(os.getenv("GEMBRIDGE_PORT"))
    if port is None:
        port = _to_int(_get(cfg, "proxy_settings", "server", "port"))

    return BridgeSettings(
        base_url=_to_str(_get(cfg, "upstream_settings", "base_url")) or defaults.base_url,
        api_version=_to_str(_get(cfg, "upstream_settings", "api_version")) or defaults.api_version,
        api_client=_to_str(_get(cfg, "upstream_settings", "api_client")) or defaults.api_client,
        timeout_seconds=_to_float(_get(cfg, "upstream_settings", "timeout_seconds"))
        or defaults.timeout_seconds,
        api_key=api_key,
        default_model=_to_str(_get(cfg, "model_settings", "default_model"))
        or defaults.default_model,
        default_embeddings_model=_to_str(_get(cfg, "model_settings", "default_embeddings_model"))
        or defaults.default_embeddings_model,
        model_prefixes=model_prefixes,
        host=host or defaults.host,
        port=port or defaults.port,
        log_level=_to_str(_get(cfg, "proxy_settings", "log_level")) or defaults.log_level,
    )
