"""Concerts admin pages, public page and homepage section."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from starlette.requests import Request
from starlette.responses import Response

from cms import database
from cms.plugins.concerts.models import Concert
from cms.plugins.types import PageContext
from cms.templating import templates

HOMEPAGE_LIMIT = 3


async def concert_list_page(request: Request, context: PageContext) -> Response:
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(select(Concert).order_by(Concert.date.desc()))
        concerts = result.scalars().all()
    return templates.TemplateResponse(
        request,
        "plugins/concerts/admin_list.html",
        {"concerts": concerts, "plugin_id": context.plugin_id},
    )


async def concert_new_page(request: Request, context: PageContext) -> Response:
    return templates.TemplateResponse(
        request,
        "plugins/concerts/admin_form.html",
        {"concert": None, "plugin_id": context.plugin_id},
    )


async def concert_edit_page(request: Request, context: PageContext) -> Response:
    concert = None
    if context.params.get("id", "").isdigit():
        async with database.AsyncSessionLocal() as db:
            concert = await db.get(Concert, int(context.params["id"]))
    if concert is None:
        return templates.TemplateResponse(request, "not_found.html", {"path": request.url.path}, status_code=404)
    return templates.TemplateResponse(
        request,
        "plugins/concerts/admin_form.html",
        {"concert": concert, "plugin_id": context.plugin_id},
    )


async def concert_public_page(request: Request, context: PageContext) -> Response:
    today = date.today()
    show_past = (context.settings or {}).get("show_past", True)
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(
            select(Concert).where(Concert.published.is_(True)).order_by(Concert.date.asc())
        )
        concerts = result.scalars().all()
    return templates.TemplateResponse(
        request,
        "plugins/concerts/public_list.html",
        {
            "upcoming": [c for c in concerts if c.date >= today],
            "past": [c for c in reversed(concerts) if c.date < today] if show_past else [],
            "public_path": context.public_path,
        },
    )


async def concerts_homepage_section(request: Request, context: PageContext) -> str:
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(
            select(Concert)
            .where(Concert.published.is_(True), Concert.date >= date.today())
            .order_by(Concert.date.asc())
            .limit(HOMEPAGE_LIMIT)
        )
        concerts = result.scalars().all()
    template = templates.get_template("plugins/concerts/homepage_section.html")
    return template.render(concerts=concerts, public_path=context.public_path)
