"""TTL cache over a catalog store.

The cache is an explicit object handed to the query path. It never raises:
a failed reload keeps serving the previous snapshot, and a failed first load
serves an empty catalog.
"""

import asyncio
import time
from typing import Callable, Optional

from rich.console import Console

from conf_tracker.enrichers.embedding import Embedder
from conf_tracker.errors import ConfTrackerError
from conf_tracker.models import Conference
from conf_tracker.sources.store import CatalogStore

console = Console()

DEFAULT_TTL_SECONDS = 300


class CatalogCache:
    """Holds the last good catalog snapshot and refreshes it on a TTL."""

    def __init__(
        self,
        store: CatalogStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[list[Conference]] = None
        self._loaded_at: Optional[float] = None
        self._lock = asyncio.Lock()
        # conference id -> lazily computed search vector (None = embedder gave nothing)
        self._embeddings: dict[str, Optional[list[float]]] = {}

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    def is_stale(self) -> bool:
        if self._loaded_at is None:
            return True
        return self._clock() - self._loaded_at > self.ttl_seconds

    async def get_conferences(self) -> list[Conference]:
        """Current catalog, reloading first if the TTL has run out."""
        if not self.is_stale():
            return self._snapshot

        # Someone else is already reloading; serve what we have
        if self._lock.locked() and self._snapshot is not None:
            return self._snapshot

        async with self._lock:
            if self.is_stale():
                await self._reload()

        return self._snapshot if self._snapshot is not None else []

    async def _reload(self) -> None:
        first_load = self._snapshot is None
        try:
            conferences = await self.store.fetch_all()
        except ConfTrackerError as e:
            if first_load:
                console.print(f"[red]Failed to load catalog from {self.store.name}: {e}[/red]")
            else:
                console.print(f"[yellow]Catalog reload failed, serving stale snapshot: {e}[/yellow]")
            return
        except Exception as e:
            console.print(f"[red]Unexpected error loading catalog from {self.store.name}: {e}[/red]")
            return

        self._snapshot = conferences
        self._loaded_at = self._clock()
        self._embeddings.clear()
        console.print(f"[dim]Catalog refreshed: {len(conferences)} conferences[/dim]")

    async def prefetch_embeddings(self, conferences: list[Conference], embedder: Embedder) -> None:
        """Embed every conference lacking a vector in one batched call."""
        missing = {
            c.id: c for c in conferences
            if not c.embedding and c.id not in self._embeddings
        }
        if not missing:
            return

        vectors = await embedder.embed([c.search_text() for c in missing.values()])
        for conference_id, vector in zip(missing, vectors):
            self._embeddings[conference_id] = vector
        console.print(f"[dim]Embedded {len(missing)} conferences without stored vectors[/dim]")

    async def conference_embedding(self, conference: Conference, embedder: Embedder) -> Optional[list[float]]:
        """Stored vector, or one computed from the search text and memoised."""
        if conference.embedding:
            return conference.embedding
        if conference.id in self._embeddings:
            return self._embeddings[conference.id]

        vector = await embedder.embed_one(conference.search_text())
        self._embeddings[conference.id] = vector
        return vector
