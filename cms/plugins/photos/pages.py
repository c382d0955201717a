"""Photo album admin pages, public gallery pages and homepage section."""

from __future__ import annotations

from sqlalchemy import select
from starlette.requests import Request
from starlette.responses import Response

from cms import database
from cms.plugins.photos.models import Album
from cms.plugins.types import PageContext
from cms.templating import templates

HOMEPAGE_LIMIT = 4


def _not_found(request: Request) -> Response:
    return templates.TemplateResponse(request, "not_found.html", {"path": request.url.path}, status_code=404)


async def album_list_page(request: Request, context: PageContext) -> Response:
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(select(Album).order_by(Album.created_at.desc(), Album.id.desc()))
        albums = result.scalars().all()
    return templates.TemplateResponse(
        request,
        "plugins/photos/admin_list.html",
        {"albums": albums, "plugin_id": context.plugin_id},
    )


async def album_new_page(request: Request, context: PageContext) -> Response:
    return templates.TemplateResponse(
        request,
        "plugins/photos/admin_form.html",
        {"album": None, "plugin_id": context.plugin_id},
    )


async def album_edit_page(request: Request, context: PageContext) -> Response:
    album = None
    if context.params.get("id", "").isdigit():
        async with database.AsyncSessionLocal() as db:
            album = await db.get(Album, int(context.params["id"]))
    if album is None:
        return _not_found(request)
    return templates.TemplateResponse(
        request,
        "plugins/photos/admin_form.html",
        {"album": album, "plugin_id": context.plugin_id},
    )


async def gallery_page(request: Request, context: PageContext) -> Response:
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(
            select(Album).where(Album.published.is_(True)).order_by(Album.created_at.desc(), Album.id.desc())
        )
        albums = result.scalars().all()
    return templates.TemplateResponse(
        request,
        "plugins/photos/gallery.html",
        {
            "albums": albums,
            "public_path": context.public_path,
            "columns": (context.settings or {}).get("grid_columns", "3"),
        },
    )


async def album_view_page(request: Request, context: PageContext) -> Response:
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(
            select(Album).where(Album.slug == context.params.get("slug"), Album.published.is_(True))
        )
        album = result.scalars().first()
    if album is None:
        return _not_found(request)
    return templates.TemplateResponse(
        request,
        "plugins/photos/album.html",
        {"album": album, "public_path": context.public_path},
    )


async def photos_homepage_section(request: Request, context: PageContext) -> str:
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(
            select(Album)
            .where(Album.published.is_(True))
            .order_by(Album.created_at.desc(), Album.id.desc())
            .limit(HOMEPAGE_LIMIT)
        )
        albums = result.scalars().all()
    template = templates.get_template("plugins/photos/homepage_section.html")
    return template.render(albums=albums, public_path=context.public_path)
