# core/config_validator.py

from typing import List
from core.config import settings, split_csv
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """
    Validate that all required environment variables are set.
    Returns list of missing required variables.
    """
    missing = []

    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")

    return missing


def validate_optional_config() -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of missing optional variables (warnings only).
    """
    warnings = []

    if not split_csv(settings.SUPER_USER_EMAILS):
        warnings.append("SUPER_USER_EMAILS (no superusers configured)")
    if not settings.BACKEND_CORS_ORIGINS:
        warnings.append("FRONTEND_ORIGINS (CORS allows no browser origins)")

    return warnings


def validate_config_on_startup():
    """
    Validate configuration on application startup.
    Raises RuntimeError in production if critical config is missing;
    elsewhere only logs, so local runs and tests can start without Supabase.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        if settings.ENV == "production":
            raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Optional configuration missing: {warning}")

    if not missing_required:
        logger.info("Configuration validation passed")
