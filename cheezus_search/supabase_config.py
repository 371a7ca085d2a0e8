"""
Supabase database configuration for the search service.

The Cheezus catalogue lives in a Supabase-hosted PostgreSQL database. This
module builds a SQLAlchemy connection string for the Supabase connection
pooler from the project URL and the database password.

Connection string format:
postgresql://postgres.[project-ref]:[password]@[pooler-host]:[port]/postgres

Environment variables:
- PROJECT_URL (or SUPABASE_URL): https://[project-ref].supabase.co
- DATABASE_PASSWORD: Database password from the Supabase dashboard
- SUPABASE_POOLER_HOST: Pooler host (region specific)
- SUPABASE_POOLER_MODE: "session" (port 5432) or "transaction" (port 6543)
"""

import logging
import os
import re
from typing import Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

SUPABASE_DATABASE_NAME = "postgres"
SUPABASE_USER_PREFIX = "postgres"
DEFAULT_POOLER_HOST = "aws-0-eu-central-1.pooler.supabase.com"
POOLER_PORTS = {"session": 5432, "transaction": 6543}

PROJECT_URL_PATTERN = re.compile(r"^https://([a-z0-9]+)\.supabase\.co/?$")


def extract_project_reference(project_url: str) -> Optional[str]:
    """
    Extract project reference from a Supabase project URL.

    Args:
        project_url: Supabase project URL (e.g., https://xkvjqhgnwqawpojjegtr.supabase.co)

    Returns:
        Project reference string or None if extraction fails

    Example:
        >>> extract_project_reference("https://xkvjqhgnwqawpojjegtr.supabase.co")
        'xkvjqhgnwqawpojjegtr'
    """
    match = PROJECT_URL_PATTERN.match(project_url or "")
    if match:
        return match.group(1)

    logger.warning(f"Could not extract project reference from: {project_url}")
    return None


def get_pooler_port(mode: Optional[str] = None) -> int:
    """
    Get the pooler port for a pooling mode.

    Unknown modes fall back to the session pooler.
    """
    mode = (mode or os.getenv("SUPABASE_POOLER_MODE", "session")).lower()
    if mode not in POOLER_PORTS:
        logger.warning(f"Unknown Supabase pooler mode '{mode}', using session pooler")
        mode = "session"
    return POOLER_PORTS[mode]


def build_supabase_connection_string() -> Optional[str]:
    """
    Build PostgreSQL connection string for the Supabase database.

    Returns:
        PostgreSQL connection string or None if required variables are missing
    """
    project_url = os.getenv("PROJECT_URL") or os.getenv("SUPABASE_URL")
    database_password = os.getenv("DATABASE_PASSWORD")

    if not project_url or not database_password:
        logger.debug("Supabase configuration incomplete: missing PROJECT_URL or DATABASE_PASSWORD")
        return None

    project_ref = extract_project_reference(project_url)
    if not project_ref:
        logger.error("Failed to extract project reference from PROJECT_URL")
        return None

    host = os.getenv("SUPABASE_POOLER_HOST", DEFAULT_POOLER_HOST)
    port = get_pooler_port()

    connection_string = (
        f"postgresql://{SUPABASE_USER_PREFIX}.{project_ref}:{quote(database_password, safe='')}"
        f"@{host}:{port}/{SUPABASE_DATABASE_NAME}"
    )

    logger.info(f"Supabase connection string built for project: {project_ref} (port {port})")
    return connection_string


def get_supabase_connection_string() -> Optional[str]:
    """
    Get Supabase PostgreSQL connection string with error handling.

    Returns:
        PostgreSQL connection string or None if construction fails
    """
    try:
        return build_supabase_connection_string()
    except Exception as e:
        logger.error(f"Error building Supabase connection string: {e}")
        return None
