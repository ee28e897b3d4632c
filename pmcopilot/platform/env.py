"""
Shared environment variable helpers and commonly-used settings.

Goal: centralize env parsing rules (stripping, int fallbacks) so
feature modules can import consistent behavior instead of duplicating logic.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load environment variables once for the whole process.
load_dotenv()

# Naive single-user placeholder until auth exists.
DEFAULT_USER_ID = "local-user"


def env_str(key: str, default: str | None = None, *, strip: bool = True) -> str | None:
    """Read an environment variable as string with optional stripping."""
    val = os.getenv(key)
    if val is None:
        return default
    if strip:
        val = val.strip()
    return val if val != "" else default


def env_int(key: str, default: int) -> int:
    """Read an environment variable as int, falling back on missing or malformed values."""
    val = env_str(key, None)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


# =============================================================================
# Server
# =============================================================================

def get_port(default: int = 4000) -> int:
    return env_int("PORT", default)


def get_host(default: str = "0.0.0.0") -> str:
    return env_str("API_HOST", default) or default


def get_share_base_url(default: str = "http://localhost:5173/") -> str:
    return env_str("SHARE_BASE_URL", default) or default


# =============================================================================
# Neo4j
# =============================================================================

def get_neo4j_uri() -> str | None:
    """Database connection string. There is no default: startup fails without it."""
    return env_str("NEO4J_URI", None)


def get_neo4j_user(default: str = "neo4j") -> str:
    return env_str("NEO4J_USER", default) or default


def get_neo4j_password(default: str = "neo4j") -> str:
    return env_str("NEO4J_PASSWORD", default) or default


def get_neo4j_database() -> str | None:
    """Target Neo4j database name; None uses the server default."""
    return env_str("NEO4J_DATABASE")


# =============================================================================
# Upstream integrations
# =============================================================================

def get_linear_api_key() -> str | None:
    return env_str("LINEAR_API_KEY")


def get_jira_settings() -> tuple[str | None, str | None, str | None]:
    """Get (base_url, email, api_token) for the Jira REST API."""
    return env_str("JIRA_BASE_URL"), env_str("JIRA_EMAIL"), env_str("JIRA_API_TOKEN")


def get_notion_settings() -> tuple[str | None, str | None, str | None]:
    """Get (api_key, parent_page, parent_db) for the Notion API."""
    return env_str("NOTION_API_KEY"), env_str("NOTION_PARENT_PAGE"), env_str("NOTION_PARENT_DB")


# Upstream HTTP timeout (seconds) for Linear / Jira / Notion calls.
UPSTREAM_TIMEOUT_SECONDS = float(env_int("UPSTREAM_TIMEOUT_SECONDS", 30))

# Sync routes rate limit.
SYNC_RATE_LIMIT_MAX = env_int("SYNC_RATE_LIMIT_MAX", 20)
SYNC_RATE_LIMIT_WINDOW_MS = env_int("SYNC_RATE_LIMIT_WINDOW_MS", 60_000)
