"""Settings for validation runs and YAML/JSON config loading.

Settings come from a dict, a YAML or JSON file, or ``VALKNOBS_*``
environment variables. String values in files may reference environment
variables:

- ``${VAR}``: value of ``VAR``; a ``ConfigurationError`` when it is unset
- ``${VAR:default}``: value of ``VAR``, or ``default`` when it is unset

A value that is exactly one reference is converted to ``bool``/``int``/
``float`` when it looks like one, so ``timeout: ${CHECK_TIMEOUT:2.5}``
yields a float.

Example settings file:

```yaml
locale: en
debounce: 0.3
timeout: ${VALIDATION_TIMEOUT:5}
retry_max_attempts: 3
strict_objects: true
```
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from valknobs_common.exceptions import ConfigurationError
from valknobs_common.retry import RetryConfig

from .results import ValidationContext

logger = logging.getLogger(__name__)

ENV_PREFIX = "VALKNOBS_"

VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def _convert_type(value: str) -> str | int | float | bool:
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _lookup(match: re.Match[str]) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name)
    if value is not None:
        return value
    if default is not None:
        return default
    raise ConfigurationError(
        f"Required environment variable not set: {name}", context={"variable": name}
    )


def substitute_env_vars(data: Any) -> Any:
    """Recursively replace ``${VAR}`` / ``${VAR:default}`` in string values.

    Raises:
        ConfigurationError: If a referenced variable without default is unset
    """
    if isinstance(data, dict):
        return {key: substitute_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [substitute_env_vars(item) for item in data]
    if isinstance(data, str):
        whole = VAR_PATTERN.fullmatch(data)
        if whole:
            return _convert_type(_lookup(whole))
        return VAR_PATTERN.sub(_lookup, data)
    return data


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML (``.yaml``/``.yml``) or JSON file into a dict.

    Environment references are substituted.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or does
            not hold a mapping
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Failed to parse config {path}: {e}", context={"path": str(path)}
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read config {path}: {e}", context={"path": str(path)}
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config must be a mapping: {path}", context={"path": str(path)}
        )
    return substitute_env_vars(data)


@dataclass
class ValidatorSettings:
    """Defaults for validation runs.

    Attributes:
        locale: Locale used to render error messages
        debounce: Default debounce for async coordinators, in seconds
        timeout: Default timeout for async coordinators, in seconds
        retry_max_attempts: Attempts for async coordinators (1 disables retry)
        retry_initial_delay: First retry delay, in seconds
        retry_max_delay: Upper bound for a retry delay, in seconds
        retry_backoff_multiplier: Growth factor between retry delays
        strict_objects: Whether objects built from schema configs reject
            unknown keys unless the config says otherwise
    """

    locale: str = "en"
    debounce: float | None = None
    timeout: float | None = None
    retry_max_attempts: int = 1
    retry_initial_delay: float = 0.1
    retry_max_delay: float = 10.0
    retry_backoff_multiplier: float = 2.0
    strict_objects: bool = False

    def __post_init__(self) -> None:
        if self.retry_max_attempts < 1:
            raise ConfigurationError(
                "retry_max_attempts must be at least 1",
                context={"retry_max_attempts": self.retry_max_attempts},
            )
        for name in ("debounce", "timeout"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigurationError(f"{name} cannot be negative", context={name: value})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidatorSettings:
        """Build settings from a dict; unknown keys are logged and ignored."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown validator settings: %s", unknown)
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_file(cls, path: str | Path) -> ValidatorSettings:
        """Load settings from a YAML or JSON file."""
        data = load_config_file(path)
        logger.info("Loaded validator settings from %s", path)
        return cls.from_dict(data.get("validation", data))

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> ValidatorSettings:
        """Build settings from ``VALKNOBS_<FIELD>`` environment variables."""
        data: dict[str, Any] = {}
        for f in fields(cls):
            raw = os.environ.get(f"{prefix}{f.name.upper()}")
            if raw is not None:
                data[f.name] = raw if f.name == "locale" else _convert_type(raw)
        return cls.from_dict(data)

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=self.retry_max_attempts,
            initial_delay=self.retry_initial_delay,
            max_delay=self.retry_max_delay,
            backoff_multiplier=self.retry_backoff_multiplier,
        )

    def context(self, data: Any = None) -> ValidationContext:
        """Root context for validating ``data`` with these settings."""
        return ValidationContext.root(data=data, locale=self.locale)
