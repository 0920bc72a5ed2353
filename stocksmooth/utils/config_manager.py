"""
Configuration management utilities.

Pipeline parameters live in ``config/pipeline_config.yaml`` and are checked
against ``config/schemas/pipeline_config_schema.json`` before use.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

logger = logging.getLogger(__name__)

PIPELINE_CONFIG = "pipeline_config.yaml"
PIPELINE_SCHEMA = "pipeline_config_schema.json"


class ConfigManager:
    """
    Loads, validates and merges the pipeline configuration.
    """

    def __init__(self, config_dir: Optional[str] = None, schema_dir: Optional[str] = None):
        self.config_dir = Path(config_dir) if config_dir else Path("config")
        self.schema_dir = Path(schema_dir) if schema_dir else self.config_dir / "schemas"
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def _read_file(path: Path) -> Any:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        if path.suffix not in (".yaml", ".yml", ".json"):
            raise ValueError(f"Unsupported configuration format: {path.suffix}")
        with open(path, "r") as f:
            if path.suffix == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def load_config(self, config_name: str, schema_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Load a YAML or JSON configuration file, optionally validating it.

        Args:
            config_name: File name inside config_dir
            schema_name: Schema file name inside schema_dir

        Returns:
            Configuration dictionary (empty for an empty file)
        """
        config = self._read_file(self.config_dir / config_name) or {}
        if schema_name:
            self.validate_config(config, schema_name)
        logger.debug(f"Loaded {config_name} from {self.config_dir}")
        return config

    def load_pipeline_config(self, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Load the pipeline configuration, apply overrides and validate the result.

        Args:
            overrides: Optional nested dictionary merged over the file contents,
                e.g. ``{"filters": {"sma": {"window": 50}}}``

        Returns:
            Validated configuration dictionary
        """
        config = self.load_config(PIPELINE_CONFIG)
        if overrides:
            config = self.merge_configs(config, overrides)
        self.validate_config(config, PIPELINE_SCHEMA)
        return config

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """Read a JSON schema, cached per manager."""
        if schema_name not in self._schemas:
            schema_path = self.schema_dir / schema_name
            if not schema_path.exists():
                raise FileNotFoundError(f"Schema file not found: {schema_path}")
            with open(schema_path, "r") as f:
                self._schemas[schema_name] = json.load(f)
        return self._schemas[schema_name]

    def validate_config(self, config: Dict[str, Any], schema_name: str) -> None:
        """
        Validate configuration against a schema.

        Every violation is reported, each prefixed with its location
        (``filters -> lowess -> frac``).

        Raises:
            ValueError: If the configuration violates the schema
        """
        schema = self.load_schema(schema_name)
        validator_cls = jsonschema.validators.validator_for(schema)
        validator = validator_cls(schema)
        errors = sorted(validator.iter_errors(config), key=lambda e: [str(p) for p in e.path])
        if errors:
            problems: List[str] = []
            for error in errors:
                location = " -> ".join(str(p) for p in error.path) if error.path else "root"
                problems.append(f"at '{location}': {error.message}")
            error_msg = "Configuration validation failed " + "; ".join(problems)
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.info(f"Configuration successfully validated against {schema_name}")

    def merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two configurations; override wins on conflicts.

        Neither argument is modified.
        """
        merged = dict(base)
        for key, value in override.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = self.merge_configs(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get_value(self, config: Dict[str, Any], path: str, default: Any = None) -> Any:
        """
        Get a value using dot notation, e.g. ``filters.kalman.observation_variance``.
        """
        current: Any = config
        for key in path.split("."):
            if not isinstance(current, dict) or key not in current:
                return default
            current = current[key]
        return current

    def set_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """
        Set a value using dot notation, creating intermediate sections.

        Args:
            config: Configuration dictionary (modified in-place)
            path: Dot-separated path
            value: Value to set
        """
        *parents, leaf = path.split(".")
        current = config
        for key in parents:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]
        current[leaf] = value
