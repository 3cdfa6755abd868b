"""Configuration management for kubeletdefaults.

Values are resolved with the following precedence:
1. Configuration file (explicit path, else the first existing default path)
2. Environment variables (a ``.env`` file is loaded if present)
3. Default values
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import DEFAULT_CLUSTER_SUBNET, DEFAULT_DNS_SERVICE_IP, DEFAULT_IMAGE_BASE

# Load environment variables from .env file if it exists
load_dotenv()

logger = logging.getLogger("kubelet.config")

DEFAULT_CONFIG_PATHS = [
    Path("/etc/kubeletdefaults/config.yaml"),
    Path("~/.config/kubeletdefaults/config.yaml").expanduser(),
    Path("kubeletdefaults.yaml").absolute(),
]

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DefaulterConfig(BaseModel):
    """Settings the loader falls back on when a cluster document omits them."""
    model_config = ConfigDict(extra="ignore")

    image_base: str = Field(
        default_factory=lambda: os.getenv("KUBELET_IMAGE_BASE", DEFAULT_IMAGE_BASE),
        description="Registry prefix for the pause image"
    )
    dns_service_ip: str = Field(
        default_factory=lambda: os.getenv("KUBELET_DNS_SERVICE_IP", DEFAULT_DNS_SERVICE_IP),
        description="Cluster DNS service IP passed as --cluster-dns"
    )
    cluster_subnet: str = Field(
        default_factory=lambda: os.getenv("KUBELET_CLUSTER_SUBNET", DEFAULT_CLUSTER_SUBNET),
        description="Pod CIDR used as --non-masquerade-cidr when masquerading is off"
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"),
        validate_default=True,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default_factory=lambda: os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
        description="Format string for log records"
    )
    config_paths: List[Path] = Field(
        default_factory=lambda: list(DEFAULT_CONFIG_PATHS),
        exclude=True
    )

    @field_validator('log_level')
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> 'DefaulterConfig':
        """Load configuration from file, falling back to environment and defaults."""
        config_data: Dict[str, Any] = {}

        if config_path:
            config_path = Path(config_path).expanduser().absolute()
            if config_path.exists():
                config_data = cls._load_config_file(config_path)
            else:
                logger.warning(f"Config file {config_path} not found, using defaults")
        else:
            for path in DEFAULT_CONFIG_PATHS:
                path = path.expanduser().absolute()
                if path.exists():
                    config_data = cls._load_config_file(path)
                    break

        return cls(**config_data)

    @classmethod
    def _load_config_file(cls, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {path}: expected a mapping")
            return {}
        return data


# Global configuration instance
_config: Optional[DefaulterConfig] = None


def get_config(config_path: Optional[Union[str, Path]] = None) -> DefaulterConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = DefaulterConfig.load(config_path)
    return _config


def set_config(config: Optional[DefaulterConfig]) -> None:
    """Set (or with None, reset) the global configuration instance."""
    global _config
    _config = config
