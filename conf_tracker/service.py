"""Chat request handling: ranking plus a model-written or fallback answer."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from rich.console import Console

from conf_tracker import config
from conf_tracker.enrichers import DeepSeekResponder, Embedder, JinaEmbedder
from conf_tracker.errors import ConfTrackerError, EmptyQueryError, ServiceBusyError
from conf_tracker.pipeline import (
    build_context_table,
    build_fallback_report,
    detect_language,
    run_query,
)
from conf_tracker.sources import CatalogCache

console = Console()


@dataclass
class ChatReply:
    message: str
    conferences: list[dict] = field(default_factory=list)
    intent: dict = field(default_factory=dict)
    fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "conferences": self.conferences,
            "intent": self.intent,
            "fallback": self.fallback,
        }


class ChatService:
    """Answers one chat message against the cached catalog."""

    def __init__(
        self,
        cache: CatalogCache,
        embedder: Optional[Embedder] = None,
        responder: Optional[DeepSeekResponder] = None,
        tz_name: str = config.REPORT_TIMEZONE,
        context_limit: int = config.CONTEXT_LIMIT,
        display_limit: int = config.DISPLAY_LIMIT,
    ):
        self.cache = cache
        self.embedder = embedder
        self.responder = responder
        self.tz_name = tz_name
        self.context_limit = context_limit
        self.display_limit = display_limit

    @classmethod
    def from_env(cls) -> "ChatService":
        """Service wired to the configured store and remote clients."""
        cache = CatalogCache(config.build_store(), ttl_seconds=config.catalog_ttl_seconds())
        return cls(
            cache,
            embedder=JinaEmbedder(),
            responder=DeepSeekResponder(),
            tz_name=config.report_timezone(),
        )

    async def answer(self, message: Optional[str], now: Optional[datetime] = None) -> ChatReply:
        """Rank, then phrase the answer.

        Raises EmptyQueryError for blank input and ServiceBusyError for
        anything unexpected; no partial ranking is returned.
        """
        if not message or not message.strip():
            raise EmptyQueryError()
        now = now or datetime.now(timezone.utc)

        try:
            result = await run_query(message, self.cache, self.embedder, now)
            top = result.top(self.context_limit)

            reply_text = None
            if self.responder is not None:
                reply_text = await self.responder.answer(
                    message, build_context_table(top), now, self.tz_name
                )

            fallback = reply_text is None
            if fallback:
                reply_text = build_fallback_report(
                    result,
                    now,
                    tz_name=self.tz_name,
                    limit=self.display_limit,
                    lang=detect_language(message),
                )

            return ChatReply(
                message=reply_text,
                conferences=[item.to_dict() for item in top[:self.display_limit]],
                intent=result.intent.to_dict(),
                fallback=fallback,
            )
        except ConfTrackerError:
            raise
        except Exception as e:
            console.print(f"[red]Chat request failed: {e}[/red]")
            raise ServiceBusyError(error=type(e).__name__) from e
