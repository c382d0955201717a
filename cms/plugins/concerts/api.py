"""
Concerts API

    ""      GET (list, ?published=true for public listings), POST (create)
    "[id]"  GET, PUT, DELETE
"""

from __future__ import annotations

import logging

from fastapi.responses import JSONResponse
from sqlalchemy import select
from starlette.requests import Request

from cms import database
from cms.dependencies import check_admin_key
from cms.exceptions import ResourceNotFoundError
from cms.plugins.concerts.models import Concert
from cms.plugins.concerts.schemas import ConcertCreate, ConcertUpdate
from cms.plugins.helpers import int_param, query_flag, read_json

logger = logging.getLogger(__name__)


async def list_concerts(request: Request, params: dict[str, str]) -> JSONResponse:
    query = select(Concert).order_by(Concert.date.asc())
    if query_flag(request, "published"):
        query = query.where(Concert.published.is_(True))

    async with database.AsyncSessionLocal() as db:
        result = await db.execute(query)
        return JSONResponse([c.to_dict() for c in result.scalars().all()])


async def create_concert(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    data = ConcertCreate.model_validate(await read_json(request))

    async with database.AsyncSessionLocal() as db:
        concert = Concert(**data.model_dump())
        db.add(concert)
        await db.commit()
        await db.refresh(concert)

    logger.info("Concert created: %s (id=%s)", concert.title, concert.id)
    return JSONResponse(concert.to_dict(), status_code=201)


async def get_concert(request: Request, params: dict[str, str]) -> JSONResponse:
    concert_id = int_param(params, "id", "Concert")
    async with database.AsyncSessionLocal() as db:
        concert = await db.get(Concert, concert_id)
        if concert is None:
            raise ResourceNotFoundError("Concert", concert_id)
        return JSONResponse(concert.to_dict())


async def update_concert(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    concert_id = int_param(params, "id", "Concert")
    data = ConcertUpdate.model_validate(await read_json(request))

    async with database.AsyncSessionLocal() as db:
        concert = await db.get(Concert, concert_id)
        if concert is None:
            raise ResourceNotFoundError("Concert", concert_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(concert, key, value)
        await db.commit()
        await db.refresh(concert)
        return JSONResponse(concert.to_dict())


async def delete_concert(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    concert_id = int_param(params, "id", "Concert")
    async with database.AsyncSessionLocal() as db:
        concert = await db.get(Concert, concert_id)
        if concert is None:
            raise ResourceNotFoundError("Concert", concert_id)
        await db.delete(concert)
        await db.commit()

    logger.info("Concert deleted: id=%s", concert_id)
    return JSONResponse({"success": True})
