"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml

DEFAULT_BASE_URL = 'https://alidocs.dingtalk.com'
DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)
DEFAULT_TITLE = 'DingTalk Document'

DEFAULT_CONFIG: Dict[str, Any] = {
    'dingtalk': {
        'base_url': DEFAULT_BASE_URL,
        'document_data_url': None,
        'cookie': None,
        'cookie_file': None,
        'user_agent': DEFAULT_USER_AGENT,
        'timeout': 30,
        'verify_ssl': True,
        'max_retries': 0
    },
    'export': {
        'output_directory': './dingtalk-docs'
    },
    'renderer': {
        'max_depth': 64,
        'default_title': DEFAULT_TITLE
    },
    'logging': {
        'level': None,
        'file': None
    }
}


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def defaults(cls) -> Dict[str, Any]:
        """Return a fresh copy of the default configuration."""
        return copy.deepcopy(DEFAULT_CONFIG)

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Values missing from the file are filled in from the defaults.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        config_data = cls._substitute_env_vars_recursive(config_data)

        return cls._merge_defaults(cls.defaults(), config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        cls._validate_required_field(config, 'dingtalk.base_url')
        cls._validate_url(get_nested(config, 'dingtalk.base_url'), 'dingtalk.base_url')

        document_data_url = get_nested(config, 'dingtalk.document_data_url')
        if document_data_url:
            cls._validate_url(document_data_url, 'dingtalk.document_data_url')

        timeout = get_nested(config, 'dingtalk.timeout', 30)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError("dingtalk.timeout must be a positive number")

        max_retries = get_nested(config, 'dingtalk.max_retries', 0)
        if isinstance(max_retries, bool) or not isinstance(max_retries, int) or max_retries < 0:
            raise ValueError("dingtalk.max_retries must be a non-negative integer")

        verify_ssl = get_nested(config, 'dingtalk.verify_ssl', True)
        if not isinstance(verify_ssl, bool):
            raise ValueError("dingtalk.verify_ssl must be a boolean")

        cls._validate_required_field(config, 'export.output_directory')
        output_dir = get_nested(config, 'export.output_directory')
        if os.path.exists(output_dir) and not os.path.isdir(output_dir):
            raise ValueError(f"export.output_directory '{output_dir}' is not a directory")

        max_depth = get_nested(config, 'renderer.max_depth', 64)
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
            raise ValueError("renderer.max_depth must be a positive integer")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        for section in ('dingtalk', 'export', 'logging'):
            if not isinstance(merged.get(section), dict):
                merged[section] = {}

        if getattr(args, 'base_url', None):
            merged['dingtalk']['base_url'] = args.base_url

        if getattr(args, 'cookie', None):
            merged['dingtalk']['cookie'] = args.cookie

        if getattr(args, 'output_dir', None):
            merged['export']['output_directory'] = args.output_dir

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        verbose = getattr(args, 'verbose', 0)
        if verbose:
            merged['logging']['level'] = 'DEBUG' if verbose >= 2 else 'INFO'

        return merged

    @classmethod
    def _merge_defaults(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively overlay override onto base."""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key] = cls._merge_defaults(base[key], value)
            else:
                base[key] = value
        return base

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config_section: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config_section, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )

    @staticmethod
    def _validate_url(url: str, field_name: str) -> None:
        """Validate URL format."""
        parsed = urlparse(str(url))
        if not parsed.scheme or parsed.scheme not in ['http', 'https']:
            raise ValueError(f"{field_name} must use http or https scheme: {url}")
        if not parsed.netloc:
            raise ValueError(f"{field_name} missing hostname: {url}")


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "dingtalk.base_url")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def document_data_url(config: Dict[str, Any], base_url: Optional[str] = None) -> str:
    """Resolve the document-data endpoint, defaulting to one below base_url."""
    explicit = get_nested(config, 'dingtalk.document_data_url')
    if explicit:
        return explicit
    base_url = (base_url or get_nested(config, 'dingtalk.base_url') or DEFAULT_BASE_URL).rstrip('/')
    return f"{base_url}/api/document/data"


__all__ = ['ConfigLoader', 'get_nested', 'document_data_url', 'DEFAULT_TITLE', 'DEFAULT_BASE_URL']
