#!/usr/bin/env python3
"""
Configuration module for the chat relay.
Loads settings from an optional YAML file, applies environment overrides and
initializes logging with Pydantic validation.
"""

import os
import sys
import logging
from enum import Enum
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

CONFIG_FILE = os.environ.get("RELAY_CONFIG_FILE", "config.yml")

# Environment variable -> (section, field)
ENV_OVERRIDES = {
    "OPENAI_API_KEY": ("upstream", "api_key"),
    "OPENAI_ORGANIZATION": ("upstream", "organization"),
    "OPENAI_PROJECT": ("upstream", "project"),
    "RELAY_HEADER_POLICY": ("relay", "header_policy"),
    "RELAY_FORCE_IDENTITY_ENCODING": ("relay", "force_identity_encoding"),
}


class HeaderPolicy(str, Enum):
    FORWARD_ALL = "forward_all"
    ALLOW_LIST = "allow_list"


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    host: str = "0.0.0.0"
    port: int = 5555
    log_level: str = "INFO"
    http_log_level: str = "INFO"
    route: str = "/api/chat"


class UpstreamConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str = "https://api.openai.com/v1/chat/completions"
    api_key: str = ""
    organization: Optional[str] = None
    project: Optional[str] = None
    health_url: str = "https://api.openai.com/v1/models"


class RelayConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    header_policy: HeaderPolicy = HeaderPolicy.FORWARD_ALL
    force_identity_encoding: bool = False


class RequestProxyConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    enabled: bool = False
    url: Optional[str] = None


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    server: ServerConfig = Field(default_factory=ServerConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    request_proxy: RequestProxyConfig = Field(
        default_factory=RequestProxyConfig, alias="requestProxy"
    )


def apply_env_overrides(config_data: Dict[str, Any], environ=None) -> Dict[str, Any]:
    """Overlay environment variables onto raw configuration data."""
    environ = os.environ if environ is None else environ
    for env_name, (section, field) in ENV_OVERRIDES.items():
        if env_name in environ:
            config_data.setdefault(section, {})[field] = environ[env_name]
    return config_data


def load_config(path: str = CONFIG_FILE, environ=None) -> AppConfig:
    """Load and validate configuration with Pydantic models.

    A missing file is not an error: serverless deployments configure the
    relay through the environment only.
    """
    try:
        try:
            with open(path, encoding="utf-8") as file:
                config_data = yaml.safe_load(file) or {}
        except FileNotFoundError:
            config_data = {}

        config_data = apply_env_overrides(config_data, environ)
        return AppConfig.model_validate(config_data)
    except (yaml.YAMLError, ValidationError) as e:
        print(f"Error in configuration: {e}")
        sys.exit(1)


def setup_logging(config_: AppConfig) -> logging.Logger:
    """Configure logging based on validated configuration."""
    log_level = config_.server.log_level
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level_int,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger_ = logging.getLogger("chat-relay")
    logger_.info("Logging level set to %s", log_level)
    return logger_


# Load and validate configuration once at startup
config = load_config()
logger = setup_logging(config)
