"""
Taskboard API - Security Validation

Startup checks of security-relevant configuration.
"""

import logging
import warnings
from typing import List, Optional

from taskboard.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "dev-secret-key-change-in-production"
MIN_SECRET_LENGTH = 32
MIN_PRODUCTION_BCRYPT_ROUNDS = 10


def find_security_issues(config: Settings) -> List[str]:
    """Return a description of every insecure setting in ``config``."""
    issues = []

    if config.is_production:
        if config.JWT_SECRET_KEY == DEFAULT_JWT_SECRET:
            issues.append(
                "Using default JWT_SECRET_KEY in production. "
                "Set JWT_SECRET_KEY environment variable to a strong secret."
            )
        elif len(config.JWT_SECRET_KEY) < MIN_SECRET_LENGTH:
            issues.append(
                f"JWT_SECRET_KEY is too short for production. "
                f"Use at least {MIN_SECRET_LENGTH} characters."
            )
        if config.BCRYPT_ROUNDS < MIN_PRODUCTION_BCRYPT_ROUNDS:
            issues.append(
                f"BCRYPT_ROUNDS below {MIN_PRODUCTION_BCRYPT_ROUNDS} is too weak for production."
            )

    if "*" in config.CORS_ORIGINS:
        issues.append("CORS wildcard (*) detected. Set specific origins via CORS_ORIGINS.")

    return issues


def validate_security_config(config: Optional[Settings] = None) -> List[str]:
    """
    Validate security configuration on startup.

    Issues warnings for insecure configurations but does not crash the application
    (to allow tests and development to run).
    """
    issues = find_security_issues(config or default_settings)
    for issue in issues:
        logger.warning("Insecure configuration: %s", issue)
        warnings.warn(f"SECURITY WARNING: {issue}", UserWarning)
    return issues
