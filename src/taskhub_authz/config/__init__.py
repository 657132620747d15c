"""Configuration module for taskhub-authz."""

from .constants import *

from .logging_config import (
    setup_logging,
    get_logger,
    LogVerbosity,
    LogFormat,
    LoggingConfig,
)

from .settings import AuthzSettings, get_settings

__all__ = [
    # Constants
    "RoleScope",
    "GlobalRole",
    "OrganizationRole",
    "TeamRole",
    "ProjectRole",
    "Visibility",
    "ResourceType",
    "Action",
    "ALL_ACTIONS",
    "READ_ONLY",
    "READ_WRITE",
    "NO_ACTIONS",
    "DecisionReason",
    "AttachmentParent",
    "TaskPriority",
    "SubtaskStatus",
    "AuditAction",
    "TRACKED_FIELDS",
    "CacheKeys",
    "CacheTTL",
    "DefaultValues",
    "ErrorCodes",
    "Headers",

    # Logging
    "setup_logging",
    "get_logger",
    "LogVerbosity",
    "LogFormat",
    "LoggingConfig",

    # Settings
    "AuthzSettings",
    "get_settings",
]
