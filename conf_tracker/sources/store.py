"""Catalog stores: where conference records are read from.

Two shapes of record are accepted. The Supabase store returns the relational
shape (`ranks`, `conference_instances`, `timeline_items`); the deadline YAML
files use the flat shape (`rank`, `confs`, `timeline`). `row_to_conference`
maps the first onto the second before validation.
"""

import hashlib
import json
import os
from pathlib import Path
from typing import Optional, Protocol

import httpx
import yaml
from pydantic import ValidationError
from rich.console import Console

from conf_tracker.errors import CatalogUnavailableError
from conf_tracker.models import Conference

console = Console()

# PostgREST embedded-resource select for one conference with its relations
CONFERENCE_SELECT = (
    "id,title,description,sub,keywords,acceptance_rate,embedding,"
    "ranks(ccf,core,thcpl),"
    "conference_instances(id,year,date,place,timezone,link,"
    "timeline_items(deadline,abstract_deadline,comment))"
)

# Category list file shipped alongside the deadline YAMLs
SKIPPED_YAML_FILES = {"types.yml", "types.yaml"}


class CatalogStore(Protocol):
    """Anything that can return the full conference catalog."""

    name: str

    async def fetch_all(self) -> list[Conference]:
        ...


def generate_conference_id(title: str) -> str:
    """Stable ID for records that arrive without one."""
    key = f"conference:{title.strip().lower()}"
    return hashlib.sha1(key.encode()).hexdigest()[:16]


def row_to_conference(row: dict) -> dict:
    """Map a relational store row onto the flat catalog shape."""
    record = {k: v for k, v in row.items() if k not in ("ranks", "conference_instances", "acceptance_rate")}

    if "ranks" in row:
        record["rank"] = row["ranks"]
    if "acceptance_rate" in row:
        record["acceptance_rates"] = row["acceptance_rate"]

    if "conference_instances" in row:
        record["confs"] = [
            {
                **{k: v for k, v in instance.items() if k != "timeline_items"},
                "timeline": instance.get("timeline_items") or [],
            }
            for instance in row.get("conference_instances") or []
        ]

    return record


def parse_conferences(records: list[dict], source: str) -> list[Conference]:
    """Validate raw records, skipping the ones that do not fit."""
    conferences = []
    for raw in records:
        if not isinstance(raw, dict):
            console.print(f"[yellow]Skipping non-object record in {source}[/yellow]")
            continue
        record = row_to_conference(raw)
        if not record.get("id") and record.get("title"):
            record["id"] = generate_conference_id(record["title"])
        try:
            conferences.append(Conference.model_validate(record))
        except ValidationError as e:
            title = record.get("title", "?")
            console.print(f"[yellow]Skipping invalid record {title!r} in {source}: {e.error_count()} errors[/yellow]")
    return conferences


class SupabaseStore:
    """Reads the catalog from Supabase through its PostgREST endpoint."""

    name = "supabase"

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.url = (url or os.environ.get("SUPABASE_URL", "")).rstrip("/")
        self.key = key or os.environ.get("SUPABASE_KEY", "")
        self._client = client
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.url and self.key)

    def _headers(self) -> dict:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Accept": "application/json",
        }

    async def _get(self, client: httpx.AsyncClient) -> list[dict]:
        response = await client.get(
            f"{self.url}/rest/v1/conferences",
            params={"select": CONFERENCE_SELECT, "order": "created_at.desc"},
            headers=self._headers(),
        )
        response.raise_for_status()
        return response.json()

    async def fetch_all(self) -> list[Conference]:
        if not self.configured:
            raise CatalogUnavailableError("SUPABASE_URL / SUPABASE_KEY not set", store=self.name)

        try:
            if self._client is not None:
                rows = await self._get(self._client)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    rows = await self._get(client)
        except httpx.HTTPStatusError as e:
            raise CatalogUnavailableError(
                f"Supabase returned HTTP {e.response.status_code}",
                store=self.name,
                status=e.response.status_code,
            ) from e
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            raise CatalogUnavailableError(f"Supabase request failed: {e}", store=self.name) from e

        if not isinstance(rows, list):
            raise CatalogUnavailableError("Unexpected Supabase payload", store=self.name)

        conferences = parse_conferences(rows, self.name)
        console.print(f"[green]Loaded {len(conferences)} conferences from Supabase[/green]")
        return conferences


class FileStore:
    """Reads the catalog from a JSON array or a directory of deadline YAMLs."""

    name = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load_records(self) -> list[dict]:
        if self.path.is_dir():
            records = []
            for yaml_file in sorted(self.path.rglob("*.y*ml")):
                if yaml_file.name in SKIPPED_YAML_FILES:
                    continue
                with open(yaml_file, encoding="utf-8") as f:
                    data = yaml.safe_load(f) or []
                # One file holds a list of conferences (usually just one)
                records.extend(data if isinstance(data, list) else [data])
            return records

        with open(self.path, encoding="utf-8") as f:
            if self.path.suffix in (".yml", ".yaml"):
                data = yaml.safe_load(f) or []
            else:
                data = json.load(f)
        if isinstance(data, dict):
            data = data.get("conferences", [])
        return data

    async def fetch_all(self) -> list[Conference]:
        if not self.path.exists():
            raise CatalogUnavailableError(f"Catalog not found: {self.path}", store=self.name)
        try:
            records = self._load_records()
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise CatalogUnavailableError(f"Cannot read catalog {self.path}: {e}", store=self.name) from e

        conferences = parse_conferences(records, str(self.path))
        console.print(f"[dim]Loaded {len(conferences)} conferences from {self.path}[/dim]")
        return conferences
