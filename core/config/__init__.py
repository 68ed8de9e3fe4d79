#!/usr/bin/env python3
"""Modular configuration system for the campaign workflow service

Configuration hierarchy:
- infra_config: Infrastructure services (PostgreSQL, NATS)
- logging_config: Logging configuration
- workflow_config: Service settings combining the sub-configs
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig, configure_logging
from .infra_config import InfraConfig
from .workflow_config import WorkflowConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = WorkflowConfig.from_env()

def get_settings() -> WorkflowConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> WorkflowConfig:
    """Reload settings from environment"""
    global settings
    settings = WorkflowConfig.from_env()
    return settings

__all__ = [
    # Main config
    'WorkflowConfig',
    'get_settings',
    'reload_settings',
    'settings',
    # Sub-configs
    'LoggingConfig',
    'InfraConfig',
    'configure_logging',
]
