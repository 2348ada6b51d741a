"""
Configuration management for Node.js Lambda functions.

Function settings are read from YAML files and validated against a JSON schema
before being mapped onto ``FunctionConfig``.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from jsonschema import ValidationError, validate

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


FUNCTION_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "entry": {"type": ["string", "null"], "minLength": 1},
        "handler": {"type": "string", "minLength": 1},
        "runtime": {"type": "string", "pattern": "^[a-z]+[a-z0-9.]*$"},
        "memory_size": {"type": "integer", "minimum": 128, "maximum": 10240},
        "timeout": {"type": "integer", "minimum": 1, "maximum": 900},
        "architecture": {"enum": ["arm64", "x86_64"]},
        "aws_sdk_connection_reuse": {"type": "boolean"},
        "deps_lock_file_path": {"type": ["string", "null"], "minLength": 1},
        "environment_variables": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
        "bundling": {
            "type": "object",
            "properties": {
                "environment": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
                "minify": {"type": "boolean"},
                "source_map": {"type": "boolean"},
                "external_modules": {"type": "array", "items": {"type": "string"}},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


@dataclass
class FunctionConfig:
    """Configuration for a single Node.js Lambda function."""

    # Handler source
    entry: Optional[str] = None
    handler: str = "handler"
    deps_lock_file_path: Optional[str] = None

    # Lambda settings
    runtime: str = "nodejs20.x"
    memory_size: int = 512
    timeout: int = 30
    architecture: str = "arm64"
    aws_sdk_connection_reuse: bool = True
    environment_variables: Dict[str, str] = field(default_factory=dict)

    # Passed through to the bundler
    bundling: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            k: v for k, v in self.__dict__.items()
            if not k.startswith('_')
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FunctionConfig":
        """Create config from a validated dictionary."""
        try:
            validate(instance=data, schema=FUNCTION_CONFIG_SCHEMA)
        except ValidationError as e:
            location = "/".join(str(p) for p in e.absolute_path) or "<root>"
            raise ConfigurationError(
                f"Invalid function configuration at {location}: {e.message}",
                details=str(e),
            )
        return cls(**data)


def load_function_config(config_path: Union[str, Path]) -> FunctionConfig:
    """Load and validate a function configuration YAML file."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse configuration: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(data).__name__}"
        )

    logger.debug(f"Loaded function configuration from {config_path}")
    return FunctionConfig.from_dict(data)
