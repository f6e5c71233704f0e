"""
HTTP routes for the figure service.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from figstore.dependencies import get_figure_store
from figstore.errors import FigureStoreError, NotFound, RenderError
from figstore.render import render
from figstore.store import FigureStore, StorageMode

logger = logging.getLogger(__name__)

CACHE_HIT_HEADER = "x-cache-hit"

router = APIRouter()


def get_renderer() -> Callable[[str], str]:
    return render


@router.post("/items/{name}", status_code=201)
async def upsert_item(
    name: str,
    request: Request,
    store: FigureStore = Depends(get_figure_store),
    renderer: Callable[[str], str] = Depends(get_renderer),
):
    if store.mode is StorageMode.EPHEMERAL:
        raise HTTPException(
            status_code=500,
            detail="No persistent store available to store what the figure is going to say",
        )

    body = await request.body()
    try:
        figure = renderer(body.decode("utf-8", errors="replace"))
    except RenderError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    try:
        await run_in_threadpool(store.put, name, figure)
    except FigureStoreError as exc:
        logger.error("Failed to store figure %r: %s", name, exc)
        raise HTTPException(status_code=500, detail=str(exc))
    return Response(status_code=201)


@router.get("/items/{name}", response_class=PlainTextResponse)
def get_item(
    name: str,
    store: FigureStore = Depends(get_figure_store),
    renderer: Callable[[str], str] = Depends(get_renderer),
):
    try:
        lookup = store.get(name)
    except NotFound:
        raise HTTPException(status_code=404, detail="No figure found!")
    except FigureStoreError as exc:
        logger.error("Failed to read figure %r: %s", name, exc)
        raise HTTPException(status_code=500, detail=str(exc))

    body = lookup.message
    if lookup.synthesized:
        try:
            body = renderer(body)
        except RenderError as exc:
            raise HTTPException(status_code=500, detail=str(exc))

    response = PlainTextResponse(body, status_code=200)
    if lookup.cache_hit:
        response.headers[CACHE_HIT_HEADER] = "true"
    return response


@router.api_route("/admin", methods=["GET", "POST", "PUT", "DELETE", "PATCH"])
def admin():
    raise HTTPException(status_code=406, detail="not implemented")
