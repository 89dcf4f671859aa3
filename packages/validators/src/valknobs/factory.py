"""Build validators from declarative (dict, YAML or JSON) definitions.

Configuration Options:
    type (str): Registered type name (``string``, ``number``, ``object`` ...)
        or one of the structural types ``tuple``, ``record``, ``literal``,
        ``enum``
    rules (list): Fluent methods to apply, in order. Each entry is a method
        name, or a single-key mapping from method name to its argument(s):
        a scalar is passed positionally, a list is spread positionally and
        a mapping is passed as keyword arguments
    required (bool): Apply ``required()``
    message (str): Replace every error message
    nullable (bool): Accept ``None``
    optional (bool): Accept a missing value
    default (any): Value used for a missing or ``None`` input
    fields (dict): ``object`` fields, each a nested definition
    strict (bool): ``object`` rejects unknown keys (defaults to the
        ``strict_objects`` setting)
    unknown_keys (str): ``object`` unknown-key mode: strip, strict or passthrough
    partial (bool): ``object`` fields are all optional
    items (dict): ``array`` item definition
    elements (list): ``tuple`` element definitions
    values / keys (dict): ``record`` value and key definitions
    value (any): ``literal`` value
    values (list): ``enum`` allowed values
    any_of / all_of (list): alternatives / conjunction of nested definitions
    not (dict): definition the value must not match

Example Configuration:
    ```yaml
    type: object
    strict: true
    fields:
      name:
        type: string
        rules:
          - trim
          - min_length: 2
      tags:
        type: array
        items: {type: string}
        rules:
          - unique: {}
      age:
        type: number
        optional: true
        rules:
          - integer
          - range: [0, 150]
    ```

Problems in a definition raise ``ConfigurationError`` while building, never
during validation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from valknobs_common.exceptions import ConfigurationError, SchemaError

from .config import ValidatorSettings, load_config_file
from .core.validator import Validator
from .registry import ValidatorRegistry, register_builtins
from .validators import (
    ObjectValidator,
    and_,
    literal,
    not_,
    one_of_values,
    or_,
    record,
    tuple_,
)
from .validators.array import ArrayValidator
from .validators.base import BaseValidator

logger = logging.getLogger(__name__)

# Methods that are not construction rules
RESERVED_RULES = frozenset(
    {
        "validate",
        "validate_async",
        "is_valid",
        "is_valid_async",
        "describe",
        "use",
        "fail",
        "type_error",
        "check_type",
        "strategies",
        "is_required",
        "is_async",
    }
)

COMBINATOR_KEYS = ("any_of", "all_of", "not")


class SchemaFactory:
    """Factory for creating validators from configuration.

    Args:
        registry: Registry resolving ``type`` names; a registry with the
            built-in types when omitted
        settings: Defaults such as ``strict_objects``
    """

    def __init__(
        self,
        registry: ValidatorRegistry | None = None,
        settings: ValidatorSettings | None = None,
    ):
        if registry is None:
            registry = register_builtins(ValidatorRegistry("schema"))
        self.registry = registry
        self.settings = settings or ValidatorSettings()

    def create(self, config: Mapping[str, Any] | None = None, **kwargs: Any) -> Validator:
        """Create a validator from a definition.

        Args:
            config: Definition mapping
            **kwargs: Definition keys, merged over ``config``

        Returns:
            The validator described by the definition

        Raises:
            ConfigurationError: If the definition is invalid
        """
        definition = {**(config or {}), **kwargs}
        validator = self._build(definition, ())
        logger.info("Created %s validator from config", validator.type_name)
        return validator

    def _build(self, config: Any, path: tuple[str, ...]) -> Validator:
        if isinstance(config, str):
            config = {"type": config}
        if not isinstance(config, Mapping):
            raise self._error("Validator definition must be a mapping", path)

        validator = self._base(config, path)
        combined = self._combinators(config, path)
        if combined is not None:
            validator = combined if validator is None else and_(validator, combined)
        if validator is None:
            raise self._error("Validator definition needs a 'type'", path)

        if config.get("required"):
            validator = self._apply(validator, "required", None, path)
        for rule in config.get("rules", []):
            validator = self._rule(validator, rule, path)

        if "message" in config:
            validator = validator.with_message(str(config["message"]))
        if config.get("nullable"):
            validator = validator.nullable()
        if config.get("optional"):
            validator = validator.optional()
        if "default" in config:
            validator = validator.default(config["default"])
        return validator

    def _base(self, config: Mapping[str, Any], path: tuple[str, ...]) -> Validator | None:
        type_name = config.get("type")
        if type_name is None:
            return None

        if type_name == "tuple":
            elements = config.get("elements", [])
            return tuple_(
                *(self._build(item, (*path, str(i))) for i, item in enumerate(elements))
            )
        if type_name == "record":
            if "values" not in config:
                raise self._error("record definition needs 'values'", path)
            keys = config.get("keys")
            return record(
                self._build(config["values"], (*path, "values")),
                self._build(keys, (*path, "keys")) if keys is not None else None,
            )
        if type_name == "literal":
            if "value" not in config:
                raise self._error("literal definition needs 'value'", path)
            return literal(config["value"])
        if type_name == "enum":
            return one_of_values(config.get("values", []))

        validator = self.registry.create(type_name)
        if validator is None:
            raise self._error(
                f"Unknown validator type: {type_name}",
                path,
                available=self.registry.list(),
            )
        if isinstance(validator, ObjectValidator):
            validator = self._object(validator, config, path)
        elif isinstance(validator, ArrayValidator) and "items" in config:
            validator = validator.of(self._build(config["items"], (*path, "items")))
        return validator

    def _object(
        self, validator: ObjectValidator, config: Mapping[str, Any], path: tuple[str, ...]
    ) -> ObjectValidator:
        fields = config.get("fields", {})
        if not isinstance(fields, Mapping):
            raise self._error("'fields' must be a mapping", path)
        validator = validator.extend(
            {name: self._build(spec, (*path, name)) for name, spec in fields.items()}
        )

        mode = config.get("unknown_keys")
        if mode is None:
            mode = "strict" if config.get("strict", self.settings.strict_objects) else "strip"
        if mode == "strict":
            validator = validator.strict()
        elif mode == "passthrough":
            validator = validator.passthrough()
        elif mode != "strip":
            raise self._error(f"Unknown unknown_keys mode: {mode}", path)

        if config.get("partial"):
            validator = validator.partial()
        return validator

    def _combinators(self, config: Mapping[str, Any], path: tuple[str, ...]) -> Validator | None:
        parts: list[Validator] = []
        if "any_of" in config:
            parts.append(or_(*self._build_list(config["any_of"], (*path, "any_of"))))
        if "all_of" in config:
            parts.append(and_(*self._build_list(config["all_of"], (*path, "all_of"))))
        if "not" in config:
            parts.append(not_(self._build(config["not"], (*path, "not"))))
        if not parts:
            return None
        return parts[0] if len(parts) == 1 else and_(*parts)

    def _build_list(self, configs: Any, path: tuple[str, ...]) -> list[Validator]:
        if not isinstance(configs, list) or not configs:
            raise self._error("Expected a non-empty list of definitions", path)
        return [self._build(item, (*path, str(i))) for i, item in enumerate(configs)]

    def _rule(self, validator: Validator, rule: Any, path: tuple[str, ...]) -> Validator:
        if isinstance(rule, str):
            return self._apply(validator, rule, None, path)
        if isinstance(rule, Mapping) and len(rule) == 1:
            ((name, args),) = rule.items()
            return self._apply(validator, name, args, path)
        raise self._error(f"Invalid rule {rule!r}; expected a name or a single-key mapping", path)

    def _apply(self, validator: Validator, name: str, args: Any,
               path: tuple[str, ...]) -> Validator:
        method = None
        if not name.startswith("_") and name not in RESERVED_RULES:
            method = getattr(validator, name, None)
        if not callable(method):
            raise self._error(
                f"Unknown rule '{name}' for {validator.type_name} validator", path, rule=name
            )
        if name == "required" and not isinstance(validator, BaseValidator):
            raise self._error("'required' needs a typed validator", path)

        try:
            if args is None:
                result = method()
            elif isinstance(args, Mapping):
                result = method(**args)
            elif isinstance(args, list):
                result = method(*args)
            else:
                result = method(args)
        except (TypeError, ValueError, SchemaError) as e:
            raise self._error(f"Invalid arguments for rule '{name}': {e}", path, rule=name) from e

        if not isinstance(result, Validator):
            raise self._error(f"Rule '{name}' did not produce a validator", path, rule=name)
        return result

    @staticmethod
    def _error(message: str, path: tuple[str, ...], **context: Any) -> ConfigurationError:
        location = ".".join(path) or "<root>"
        return ConfigurationError(f"{message} (at {location})", context={"path": location, **context})


def load_schema(
    path: str | Path,
    registry: ValidatorRegistry | None = None,
    settings: ValidatorSettings | None = None,
) -> Validator:
    """Build a validator from a YAML or JSON definition file."""
    config = load_config_file(path)
    logger.info("Loading validator schema from %s", path)
    return SchemaFactory(registry, settings).create(config)
