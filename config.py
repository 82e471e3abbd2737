"""
Minimal configuration.
Everything is read from the environment (or a .env file).
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# Application Configuration
APP_CONFIG = {
    "debug": os.getenv("DEBUG", "false").lower() == "true",
    "name": "Query Assembler",
    "version": "1.0.0",

    # Server settings
    "host": os.getenv("APP_HOST", "0.0.0.0"),
    "port": int(os.getenv("APP_PORT", "8000"))
}

# Assembler Configuration
ASSEMBLER_CONFIG = {
    # "shared" keeps $N unique across CTEs, "per_query" restarts at $1 per sub-query
    "placeholder_numbering": os.getenv("PLACEHOLDER_NUMBERING", "shared").lower(),
    "validate_by_default": os.getenv("VALIDATE_QUERIES", "false").lower() == "true"
}

# Logging Configuration
LOG_CONFIG = {
    "level": "INFO" if not APP_CONFIG["debug"] else "DEBUG",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
}


def check_config():
    """Check configuration and log the effective settings."""
    import logging

    logger = logging.getLogger(__name__)

    if ASSEMBLER_CONFIG["placeholder_numbering"] not in ("shared", "per_query"):
        logger.warning(
            f"Unknown PLACEHOLDER_NUMBERING '{ASSEMBLER_CONFIG['placeholder_numbering']}', "
            f"falling back to 'shared'"
        )
        ASSEMBLER_CONFIG["placeholder_numbering"] = "shared"

    if ASSEMBLER_CONFIG["placeholder_numbering"] == "per_query":
        logger.warning("Per-query placeholder numbering enabled: CTE placeholders may collide")

    logger.info(
        f"{APP_CONFIG['name']} {APP_CONFIG['version']} - "
        f"numbering={ASSEMBLER_CONFIG['placeholder_numbering']}, "
        f"validate={ASSEMBLER_CONFIG['validate_by_default']}"
    )


# Run config check on import
check_config()
