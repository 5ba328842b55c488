import logging
from typing import Any, List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.errors import CorpusUnavailableError
from app.services.deity_graph import build_deity_graph
from app.services.llm import ChatGateway
from app.services.verse_store import VerseStore

logger = logging.getLogger(__name__)

hymns_router = APIRouter()
chatbot_router = APIRouter()
router = APIRouter()


class AskRequest(BaseModel):
    prompt: Any = None


class Source(BaseModel):
    uri: str
    title: str


class AskResponse(BaseModel):
    response: str
    sources: List[Source]


def get_verse_store(request: Request) -> VerseStore:
    """The corpus loaded at startup, or 503 if loading failed."""
    store = getattr(request.app.state, "verse_store", None)
    if store is None:
        raise CorpusUnavailableError(
            "Verse corpus is unavailable.",
            details=getattr(request.app.state, "corpus_error", None),
        )
    return store


def get_chat_gateway(request: Request) -> ChatGateway:
    gateway = getattr(request.app.state, "chat_gateway", None)
    return gateway if gateway is not None else ChatGateway()


@hymns_router.get("/")
async def get_all(store: VerseStore = Depends(get_verse_store)):
    """All verses in corpus order."""
    return [r.as_json() for r in store.get_all()]


@hymns_router.get("/mandala/{mandala_id}")
async def get_by_mandala(mandala_id: str, store: VerseStore = Depends(get_verse_store)):
    return [r.as_json() for r in store.get_by_mandala(mandala_id)]


@hymns_router.get("/deity-graph")
async def get_deity_graph(
    format: Literal["flat", "cytoscape"] = "flat",
    store: VerseStore = Depends(get_verse_store),
):
    """
    Deity/verse graph for visualization.

    ``format=cytoscape`` wraps every node and link in a ``{"data": ...}``
    envelope.
    """
    try:
        graph = build_deity_graph(store.get_all())
    except Exception:
        logger.exception("Error generating graph")
        return JSONResponse(
            status_code=500, content={"error": "Failed to generate deity graph"}
        )
    if format == "cytoscape":
        return graph.to_cytoscape()
    return graph


@hymns_router.get("/deity/{name}")
async def get_by_deity(name: str, store: VerseStore = Depends(get_verse_store)):
    """Verses addressed to a deity, with a count."""
    return store.get_by_deity(name)


@hymns_router.get("/search")
async def search(
    q: Optional[str] = Query(None), store: VerseStore = Depends(get_verse_store)
):
    """Substring search across keywords, deities and themes."""
    return [r.as_json() for r in store.search(q)]


@hymns_router.get("/themes/{name}")
async def get_by_theme(name: str, store: VerseStore = Depends(get_verse_store)):
    return [r.as_json() for r in store.get_by_theme(name)]


@hymns_router.get("/{mandala}/{hymn}/{verse}")
async def get_verse(
    mandala: str,
    hymn: str,
    verse: str,
    store: VerseStore = Depends(get_verse_store),
):
    return store.get_verse(mandala, hymn, verse).as_json()


@chatbot_router.post("/ask", response_model=AskResponse)
async def ask(
    request: Optional[AskRequest] = None,
    gateway: ChatGateway = Depends(get_chat_gateway),
):
    """Ask the Rigveda scholar persona a question."""
    prompt = request.prompt if request is not None else None
    return await gateway.ask(prompt)


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    store = getattr(request.app.state, "verse_store", None)
    return {
        "status": "healthy" if store is not None else "degraded",
        "corpus_loaded": store is not None,
        "verse_count": len(store) if store is not None else 0,
        "chatbot_configured": get_chat_gateway(request).configured,
    }


router.include_router(hymns_router, prefix="/hymns", tags=["hymns"])
router.include_router(chatbot_router, prefix="/chatbot", tags=["chatbot"])
