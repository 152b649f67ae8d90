from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request

from ..resources import list_resources, read_resource, resource_template
from ..schemas import (
    ReadResourceRequest,
    ReadResourceResponse,
    ResourceListResponse,
    ResourceTemplateListResponse,
)


router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("", response_model=ResourceListResponse)
async def get_resources(request: Request, cursor: str | None = None) -> ResourceListResponse:
    store = request.app.state.store
    page_size = request.app.state.settings.resource_page_size
    return await asyncio.to_thread(list_resources, store, cursor, page_size)


@router.get("/templates", response_model=ResourceTemplateListResponse)
async def get_resource_templates(request: Request) -> ResourceTemplateListResponse:
    return ResourceTemplateListResponse(resource_templates=[resource_template(request.app.state.store)])


@router.post("/read", response_model=ReadResourceResponse)
async def post_read_resource(payload: ReadResourceRequest, request: Request) -> ReadResourceResponse:
    return await asyncio.to_thread(read_resource, request.app.state.store, payload.uri)
