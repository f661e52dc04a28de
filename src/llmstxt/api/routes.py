"""API routes exposing crawl, diff and ``llms.txt`` retrieval."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from llmstxt.errors import InvalidBaseUrlError, SnapshotNotFoundError, StoreError
from llmstxt.models import DiffReport, Snapshot
from llmstxt.services.monitoring import SnapshotService

logger = logging.getLogger(__name__)

router = APIRouter()


class DiffResponse(BaseModel):
    base_url: str
    added: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    modified: List[str] = Field(default_factory=list)

    @classmethod
    def from_report(cls, base_url: str, report: DiffReport) -> "DiffResponse":
        return cls(
            base_url=base_url,
            added=sorted(report.added),
            removed=sorted(report.removed),
            modified=sorted(report.modified),
        )


class SnapshotResponse(BaseModel):
    id: int | None
    base_url: str
    created_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "SnapshotResponse":
        return cls(id=snapshot.id, base_url=snapshot.base_url, created_at=snapshot.created_at)


class SitesResponse(BaseModel):
    sites: List[str] = Field(default_factory=list)


def _service(request: Request) -> SnapshotService:
    return request.app.state.service


@router.api_route("/crawl", methods=["GET", "POST"], response_model=DiffResponse)
async def crawl(request: Request, base_url: str = Query(..., alias="baseUrl")) -> DiffResponse:
    """Crawl ``baseUrl`` and return what changed since the previous snapshot."""

    try:
        report = await run_in_threadpool(_service(request).crawl_and_update, base_url)
    except InvalidBaseUrlError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StoreError as exc:
        logger.exception("Storage failure for %s", base_url)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return DiffResponse.from_report(base_url, report)


@router.post("/recrawl", response_model=SnapshotResponse)
async def recrawl(request: Request, base_url: str = Query(..., alias="baseUrl")) -> SnapshotResponse:
    """Discard stored snapshots for ``baseUrl`` and crawl it again."""

    try:
        snapshot = await run_in_threadpool(_service(request).recrawl_fresh, base_url)
    except InvalidBaseUrlError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StoreError as exc:
        logger.exception("Storage failure for %s", base_url)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return SnapshotResponse.from_snapshot(snapshot)


@router.get("/llms.txt", response_class=PlainTextResponse)
async def llms_txt(request: Request, base_url: str = Query(..., alias="baseUrl")) -> str:
    """Return the ``llms.txt`` rendering of the newest snapshot for ``baseUrl``."""

    try:
        return await run_in_threadpool(_service(request).get_latest_text, base_url)
    except SnapshotNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except StoreError as exc:
        logger.exception("Storage failure for %s", base_url)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/sites", response_model=SitesResponse)
async def list_sites(request: Request) -> SitesResponse:
    """Return every base URL that has at least one stored snapshot."""

    try:
        sites = await run_in_threadpool(_service(request).store.all_base_urls)
    except StoreError as exc:
        logger.exception("Failed to list monitored sites")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return SitesResponse(sites=sites)
