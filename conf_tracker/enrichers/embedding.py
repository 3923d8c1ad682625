"""Text embeddings via the Jina embeddings API.

Used for the query vector and for conferences stored without one. Every
failure (missing key, transport error, bad status, odd payload) yields None
for the affected inputs; callers then score by keyword overlap.
"""

import asyncio
import os
from collections import OrderedDict
from typing import Optional, Protocol

import httpx
from rich.console import Console

console = Console()

JINA_URL = "https://api.jina.ai/v1/embeddings"
MODEL = "jina-embeddings-v3"
TASK = "text-matching"
BATCH_SIZE = 10
BATCH_PAUSE_SECONDS = 0.1

# Memo key is the text prefix; long search texts rarely differ this early
CACHE_KEY_CHARS = 100
# Oldest entries are evicted past this many memoised texts
CACHE_MAX_ENTRIES = 2048


class Embedder(Protocol):
    @property
    def available(self) -> bool:
        ...

    async def embed(self, texts: list[str]) -> list[Optional[list[float]]]:
        ...

    async def embed_one(self, text: str) -> Optional[list[float]]:
        ...


class JinaEmbedder:
    """Batched Jina client with an in-process memo."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        url: str = JINA_URL,
        model: str = MODEL,
        timeout: float = 30.0,
        cache_size: int = CACHE_MAX_ENTRIES,
    ):
        self.api_key = api_key if api_key is not None else os.environ.get("JINA_API_KEY", "")
        self.url = url
        self.model = model
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout
        self.cache_size = cache_size
        self._cache: OrderedDict[str, list[float]] = OrderedDict()

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def _request(self, batch: list[str]) -> Optional[list[Optional[list[float]]]]:
        """One API call. Returns vectors aligned with the batch, or None on failure."""
        try:
            response = await self._get_client().post(
                self.url,
                json={"model": self.model, "task": TASK, "input": batch},
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
            )
            response.raise_for_status()
            data = response.json().get("data") or []
        except httpx.HTTPStatusError as e:
            console.print(f"[yellow]Embedding API error: HTTP {e.response.status_code}[/yellow]")
            return None
        except httpx.TimeoutException:
            console.print("[yellow]Embedding API timeout[/yellow]")
            return None
        except Exception as e:
            console.print(f"[yellow]Embedding API failed: {e}[/yellow]")
            return None

        vectors: list[Optional[list[float]]] = [None] * len(batch)
        for position, entry in enumerate(data):
            index = entry.get("index", position) if isinstance(entry, dict) else position
            vector = entry.get("embedding") if isinstance(entry, dict) else None
            if 0 <= index < len(batch) and vector:
                vectors[index] = vector
        return vectors

    def _cached(self, text: str) -> Optional[list[float]]:
        key = text[:CACHE_KEY_CHARS]
        vector = self._cache.get(key)
        if vector is not None:
            self._cache.move_to_end(key)
        return vector

    def _remember(self, text: str, vector: list[float]) -> None:
        key = text[:CACHE_KEY_CHARS]
        self._cache[key] = vector
        self._cache.move_to_end(key)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

    async def embed(self, texts: list[str]) -> list[Optional[list[float]]]:
        """Vectors for each text, None where the service gave nothing."""
        results: list[Optional[list[float]]] = [None] * len(texts)
        if not self.available or not texts:
            return results

        pending: list[int] = []
        for i, text in enumerate(texts):
            cached = self._cached(text)
            if cached is not None:
                results[i] = cached
            else:
                pending.append(i)

        for start in range(0, len(pending), BATCH_SIZE):
            indices = pending[start:start + BATCH_SIZE]
            vectors = await self._request([texts[i] for i in indices])
            if vectors is not None:
                for i, vector in zip(indices, vectors):
                    if vector:
                        results[i] = vector
                        self._remember(texts[i], vector)

            # Stay under the rate limit between batches
            if start + BATCH_SIZE < len(pending):
                await asyncio.sleep(BATCH_PAUSE_SECONDS)

        return results

    async def embed_one(self, text: str) -> Optional[list[float]]:
        if not text:
            return None
        return (await self.embed([text]))[0]
