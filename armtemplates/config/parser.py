"""YAML service configuration parser."""
from typing import Any, Dict, Optional

import yaml

from .schema import ServerlessAzureConfig


class ConfigParser:
    """Parser for serverless YAML configuration files."""

    @staticmethod
    def load(file_path: str, overrides: Optional[Dict[str, Any]] = None) -> ServerlessAzureConfig:
        """Load and validate a YAML configuration file.

        Args:
            file_path: Path to the YAML configuration file.
            overrides: Provider fields (e.g. region, stage) that replace the
                values from the file when not None.

        Returns:
            ServerlessAzureConfig: Validated configuration object.

        Raises:
            FileNotFoundError: If the configuration file doesn't exist.
            ValidationError: If the configuration is invalid.
            ValueError: If the document is not a mapping.
            yaml.YAMLError: If the YAML is malformed.
        """
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
        return ConfigParser.from_dict({} if data is None else data, overrides)

    @staticmethod
    def from_dict(data: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> ServerlessAzureConfig:
        """Validate an in-memory configuration mapping."""
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a mapping, not {type(data).__name__}")
        if overrides:
            provider = dict(data.get("provider") or {})
            for key, value in overrides.items():
                if value is None:
                    continue
                # Drop the alias so the override is not shadowed by it
                if key == "region":
                    provider.pop("location", None)
                provider[key] = value
            data = {**data, "provider": provider}
        return ServerlessAzureConfig.model_validate(data)
