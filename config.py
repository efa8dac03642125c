#!/usr/bin/env python3
"""
Configuration loader for the TVDB Episode Provider
Loads configuration from config.yaml file.
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass

from tvdb import DEFAULT_BASE_URL


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, float):
        return int(value)
    if isinstance(value, int):
        return value
    return default


@dataclass
class ProxyConfig:
    """Proxy configuration"""
    host: str
    port: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional['ProxyConfig']:
        """Create ProxyConfig from dictionary"""
        if not data:
            return None
        host = data.get('host')
        port = data.get('port')
        if not host or not port:
            return None
        return cls(host=host, port=port)


@dataclass
class TvdbConfig:
    """TVDB API configuration"""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    language: str = "en"
    rate_limit: int = 20
    timeout: int = 30

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TvdbConfig':
        """Create TvdbConfig from dictionary"""
        # Get API key from config or environment
        api_key = data.get('api_key', '')
        if not api_key:
            api_key = os.getenv('TVDB_API_KEY', '')

        base_url = data.get('base_url') or DEFAULT_BASE_URL
        language = data.get('language') or "en"

        return cls(
            api_key=api_key,
            base_url=base_url,
            language=language,
            rate_limit=_as_int(data.get('rate_limit', 20), 20),
            timeout=_as_int(data.get('timeout', 30), 30)
        )


@dataclass
class LoggingConfig:
    """Logging configuration"""
    log_file: Optional[str] = None
    verbose: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'LoggingConfig':
        """Create LoggingConfig from dictionary"""
        if not data:
            return cls()
        return cls(
            log_file=data.get('log_file') or None,
            verbose=bool(data.get('verbose', False))
        )


@dataclass
class Config:
    """Complete application configuration"""
    tvdb: TvdbConfig
    proxy: Optional[ProxyConfig] = None
    logging: Optional[LoggingConfig] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create Config from dictionary"""
        tvdb_section = data.get('tvdb', {})
        if not tvdb_section:
            raise ValueError(
                "TVDB configuration section not found in config.yaml.\n"
                "Please add a 'tvdb' section with your API settings."
            )

        tvdb_config = TvdbConfig.from_dict(tvdb_section)

        if not tvdb_config.api_key:
            raise ValueError(
                "TVDB API key not found in config.yaml or TVDB_API_KEY environment variable.\n"
                "Please set tvdb.api_key in config.yaml or set TVDB_API_KEY environment variable."
            )

        # Load proxy configuration from root level
        proxy_data = data.get('proxy')
        proxy = ProxyConfig.from_dict(proxy_data) if proxy_data else None

        return cls(
            tvdb=tvdb_config,
            proxy=proxy,
            logging=LoggingConfig.from_dict(data.get('logging'))
        )


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load complete configuration from YAML file

    Args:
        config_path: Path to config.yaml file. If None, uses the CONFIG_PATH
                     environment variable, then looks for config.yaml in the
                     current directory or script directory.

    Returns:
        Config object with all loaded configurations

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If required configuration is missing
    """
    if config_path is None:
        config_path = os.getenv('CONFIG_PATH')

    if config_path is None:
        # Try current directory first
        config_file = Path.cwd() / 'config.yaml'

        # If not found, try script directory
        if not config_file.exists():
            config_file = Path(__file__).parent / 'config.yaml'
    else:
        config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_file}\n"
            f"Please create config.yaml with your API settings."
        )

    with open(config_file, 'r', encoding='utf-8') as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        raise ValueError("Configuration file is empty")

    return Config.from_dict(config_data)
