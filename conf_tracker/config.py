"""Runtime configuration from environment variables.

`.env` files are loaded by the CLI and the API app at start-up; this module
only reads `os.environ` when a value is asked for.
"""

import os
from pathlib import Path

from rich.console import Console

from conf_tracker.sources.store import CatalogStore, FileStore, SupabaseStore

console = Console()

CATALOG_TTL_SECONDS = 300
REPORT_TIMEZONE = "Asia/Shanghai"
DEFAULT_CATALOG_PATH = Path(__file__).parent.parent / "data" / "conferences.json"

# How many ranked conferences go into the model context and the reply
CONTEXT_LIMIT = 10
DISPLAY_LIMIT = 5


def catalog_ttl_seconds() -> float:
    value = os.environ.get("CATALOG_TTL_SECONDS")
    if not value:
        return CATALOG_TTL_SECONDS
    try:
        return float(value)
    except ValueError:
        console.print(f"[yellow]Ignoring invalid CATALOG_TTL_SECONDS={value!r}[/yellow]")
        return CATALOG_TTL_SECONDS


def report_timezone() -> str:
    return os.environ.get("REPORT_TIMEZONE") or REPORT_TIMEZONE


def catalog_path() -> Path:
    return Path(os.environ.get("CATALOG_PATH") or DEFAULT_CATALOG_PATH)


def build_store() -> CatalogStore:
    """Supabase when credentials are present, else the local file catalog."""
    supabase = SupabaseStore()
    if supabase.configured:
        return supabase
    path = catalog_path()
    console.print(f"[dim]Supabase not configured, using file catalog {path}[/dim]")
    return FileStore(path)
