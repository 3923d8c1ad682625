"""HTTP surface: POST /api/chat and GET /health."""

from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from rich.console import Console

from conf_tracker import __version__
from conf_tracker.errors import EmptyQueryError, ServiceBusyError
from conf_tracker.service import ChatService

console = Console()


class ChatRequest(BaseModel):
    message: Optional[str] = None

    class Config:
        extra = "ignore"


def create_app(service: Optional[ChatService] = None) -> FastAPI:
    """Build the app. Without a service, one is wired from the environment."""
    if service is None:
        load_dotenv(override=True)
        service = ChatService.from_env()

    app = FastAPI(title="conf-tracker", version=__version__)
    app.state.service = service

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "version": __version__,
            "catalogLoaded": service.cache.loaded,
            "store": service.cache.store.name,
        }

    @app.post("/api/chat")
    async def chat(request: ChatRequest):
        try:
            reply = await service.answer(request.message)
        except EmptyQueryError as e:
            return JSONResponse({"message": e.message}, status_code=400)
        except ServiceBusyError as e:
            return JSONResponse({"message": e.message}, status_code=500)
        return reply.to_dict()

    return app
