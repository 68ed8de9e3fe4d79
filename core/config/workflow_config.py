#!/usr/bin/env python3
"""Campaign workflow service main configuration

Combines the sub-configs with the workflow-specific settings.
"""
import os
from dataclasses import dataclass, field
from typing import List

from .infra_config import InfraConfig
from .logging_config import LoggingConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _list(val: str) -> List[str]:
    return [item.strip().lower() for item in val.split(",") if item.strip()]


@dataclass
class WorkflowConfig:
    """Main campaign workflow configuration with all sub-configs"""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Service settings
    service_name: str = "campaign_workflow_service"
    service_host: str = "0.0.0.0"
    service_port: int = 8251

    # E-mail domains whose users are platform super-admins
    super_admin_email_domains: List[str] = field(default_factory=lambda: ["boostdata.io"])

    # Notification delivery
    notification_service_url: str = "http://localhost:8206"
    notification_delivery_enabled: bool = True
    notification_timeout: int = 10

    # Sub-configurations
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    infrastructure: InfraConfig = field(default_factory=InfraConfig)

    @classmethod
    def from_env(cls) -> 'WorkflowConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            # Environment
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),

            # Service settings
            service_name=os.getenv("SERVICE_NAME", "campaign_workflow_service"),
            service_host=os.getenv("HOST", "0.0.0.0"),
            service_port=_int(os.getenv("SERVICE_PORT", "8251"), 8251),

            super_admin_email_domains=_list(os.getenv("SUPER_ADMIN_EMAIL_DOMAINS", "boostdata.io")),

            # Notification delivery
            notification_service_url=os.getenv("NOTIFICATION_SERVICE_URL", "http://localhost:8206"),
            notification_delivery_enabled=_bool(os.getenv("NOTIFICATION_DELIVERY_ENABLED", "true")),
            notification_timeout=_int(os.getenv("NOTIFICATION_TIMEOUT", "10"), 10),

            # Load sub-configs
            logging=LoggingConfig.from_env(),
            infrastructure=InfraConfig.from_env(),
        )
