"""
Configuration Loader

Loads connection settings from YAML files with environment overrides.
"""

import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import os

DEFAULT_PORT = 443
DEFAULT_TIMEOUT = 30

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


class ConfigLoader:
    """
    Load and validate YAML configuration files.
    """
    
    @staticmethod
    def load(config_path: str, required_keys: Optional[list] = None) -> Dict[str, Any]:
        """
        Load a YAML configuration file.
        
        Args:
            config_path: Path to YAML file
            required_keys: List of keys that must be present in config
        
        Returns:
            Configuration dictionary
        
        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If required keys are missing or the document is not a mapping
            yaml.YAMLError: If YAML is invalid
        """
        path = Path(config_path)
        
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        
        with open(path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
        
        if config is None:
            config = {}
        
        if not isinstance(config, dict):
            raise ValueError(f"Configuration root must be a mapping: {config_path}")
        
        if required_keys:
            missing = [key for key in required_keys if key not in config]
            if missing:
                raise ValueError(f"Missing required configuration keys: {missing}")
        
        return config
    
    @staticmethod
    def load_with_env_override(config_path: str, env_prefix: str = "CXSESSION_") -> Dict[str, Any]:
        """
        Load config and override with environment variables.
        
        CXSESSION_SERVER overrides config['server'], CXSESSION_PORT
        overrides config['port'], and so on.
        
        Args:
            config_path: Path to YAML file
            env_prefix: Prefix for environment variables
        
        Returns:
            Configuration dictionary with env overrides applied
        """
        config = ConfigLoader.load(config_path)
        
        for key, value in os.environ.items():
            if key.startswith(env_prefix):
                config_key = key[len(env_prefix):].lower()
                config[config_key] = value
        
        return config


def _to_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for '{key}': {value!r}")


@dataclass(frozen=True)
class ConnectionSettings:
    """Caller-facing connection options"""
    server: str
    port: int = DEFAULT_PORT
    username: Optional[str] = None
    password: Optional[str] = None
    skip_certificate_check: bool = False
    default_connection: bool = True
    timeout: float = DEFAULT_TIMEOUT
    keep_alive: bool = True
    
    def __post_init__(self):
        if not self.server:
            raise ValueError("server is required")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be in 1-65535, got {self.port}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConnectionSettings':
        """Build settings from a loosely typed mapping (YAML or env strings)"""
        if not data.get('server'):
            raise ValueError("Missing required configuration keys: ['server']")
        
        return cls(
            server=str(data['server']),
            port=int(data.get('port', DEFAULT_PORT)),
            username=data.get('username'),
            password=data.get('password'),
            skip_certificate_check=_to_bool(
                data.get('skip_certificate_check', False), 'skip_certificate_check'
            ),
            default_connection=_to_bool(
                data.get('default_connection', True), 'default_connection'
            ),
            timeout=float(data.get('timeout', DEFAULT_TIMEOUT)),
            keep_alive=_to_bool(data.get('keep_alive', True), 'keep_alive')
        )
    
    @classmethod
    def load(cls, config_path: str, env_prefix: str = "CXSESSION_") -> 'ConnectionSettings':
        """Load settings from YAML with environment overrides applied"""
        return cls.from_dict(
            ConfigLoader.load_with_env_override(config_path, env_prefix)
        )
    
    def __repr__(self) -> str:
        return (
            f"ConnectionSettings(server={self.server!r}, port={self.port}, "
            f"username={self.username!r}, password={'***' if self.password else None}, "
            f"skip_certificate_check={self.skip_certificate_check}, "
            f"default_connection={self.default_connection}, "
            f"timeout={self.timeout}, keep_alive={self.keep_alive})"
        )
