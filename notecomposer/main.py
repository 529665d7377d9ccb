"""FastAPI application: WebSocket editing channel, abbreviation and template APIs."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware

from notecomposer.abbreviations.store import AbbreviationStore
from notecomposer.config import settings
from notecomposer.document.normalizer import auto_format, finalize
from notecomposer.document.templates import Template, get_template, quick_snippets
from notecomposer.models import (
    AbbreviationEntry,
    AbbreviationPayload,
    StoreResult,
    StoreStatus,
    TemplateInfo,
    TextPayload,
)
from notecomposer.websocket_handler import handle_websocket

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_STATUS_CODES = {
    StoreStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    StoreStatus.INVALID: status.HTTP_400_BAD_REQUEST,
    StoreStatus.EXISTS: status.HTTP_409_CONFLICT,
    StoreStatus.STORE_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the abbreviation store on startup, close it on shutdown."""
    store = AbbreviationStore().open()
    app.state.abbreviations = store
    if store.degraded:
        logger.warning(
            "Abbreviation persistence degraded (%s). Expansion uses the in-memory table.",
            store.last_error,
        )
    else:
        logger.info("Abbreviation store ready at %s (%d entries).", store.db_path, len(store))
    yield
    store.close()
    logger.info("Shutting down.")


app = FastAPI(
    title="Clinical Note Composer",
    description="Section-based note composition with abbreviation expansion and export",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _store(request: Request) -> AbbreviationStore:
    return request.app.state.abbreviations


def _raise_for_result(result: StoreResult) -> None:
    if result.ok:
        return
    raise HTTPException(status_code=_STATUS_CODES[result.status], detail=result.message)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await handle_websocket(websocket, websocket.app.state.abbreviations)


@app.get("/health")
async def health(request: Request):
    store = _store(request)
    return {
        "status": "degraded" if store.degraded else "ok",
        "abbreviations": len(store),
        "abbreviation_store_error": store.last_error,
    }


@app.get("/abbreviations")
def list_abbreviations(request: Request) -> list[AbbreviationEntry]:
    return [AbbreviationEntry(short=k, full=v) for k, v in _store(request).entries()]


@app.get("/abbreviations/{short}")
def find_abbreviation(short: str, request: Request) -> StoreResult:
    result = _store(request).find(short)
    _raise_for_result(result)
    return result


@app.post("/abbreviations", status_code=status.HTTP_201_CREATED)
def add_abbreviation(payload: AbbreviationPayload, request: Request) -> StoreResult:
    result = _store(request).add(payload.short, payload.full)
    _raise_for_result(result)
    return result


@app.put("/abbreviations/{short}")
def edit_abbreviation(short: str, payload: AbbreviationPayload, request: Request) -> StoreResult:
    result = _store(request).edit(short, payload.full)
    _raise_for_result(result)
    return result


@app.delete("/abbreviations/{short}")
def delete_abbreviation(short: str, request: Request) -> StoreResult:
    result = _store(request).delete(short)
    _raise_for_result(result)
    return result


def _template_info(template: Template) -> TemplateInfo:
    snippets = quick_snippets()
    return TemplateInfo(
        name=template.name,
        display_name=template.display_name,
        body=template.body(),
        quick_snippet=template in snippets,
        snippet_order=snippets.index(template) if template in snippets else None,
    )


@app.get("/templates")
async def list_templates() -> list[TemplateInfo]:
    return [_template_info(t) for t in Template]


@app.get("/templates/{name}")
async def get_template_body(name: str) -> TemplateInfo:
    template = get_template(name)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown template: {name}")
    return _template_info(template)


@app.post("/format")
async def format_text(payload: TextPayload) -> TextPayload:
    return TextPayload(text=auto_format(payload.text))


@app.post("/finalize")
async def finalize_text(payload: TextPayload) -> TextPayload:
    return TextPayload(text=finalize(payload.text))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "notecomposer.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
