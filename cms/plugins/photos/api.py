"""
Photos API

    ""                GET (albums, ?published=true), POST (create album)
    "upload"          POST multipart form: files (one or more), album_id
    "file/[key]"      GET stored image bytes
    "album/[slug]"    GET album with photos (published only unless ?published=false)
    "photo/[photoId]" GET, PUT, DELETE a single photo
    "[id]/photos"     GET photos, POST photo metadata (object or list)
    "[id]/reorder"    PUT {"photo_ids": [...]}
    "[id]"            GET, PUT, DELETE an album

Static routes are declared before the dynamic "[id]" routes that would
otherwise shadow them.
"""

from __future__ import annotations

import logging
import re
import uuid

from fastapi.responses import JSONResponse, Response
from sqlalchemy import delete, func, select, update
from starlette.datastructures import UploadFile
from starlette.requests import Request
from unidecode import unidecode

from cms import database
from cms.dependencies import check_admin_key
from cms.exceptions import DuplicateResourceError, ResourceNotFoundError, ValidationError
from cms.plugins.helpers import int_param, query_flag, read_json
from cms.plugins.photos.models import Album, Photo, StoredFile
from cms.plugins.photos.schemas import AlbumCreate, AlbumUpdate, PhotoCreate, PhotoReorder, PhotoUpdate

logger = logging.getLogger(__name__)

FILE_URL_PREFIX = "/api/p/photos/file/"
MAX_UPLOAD_BYTES = 20 * 1024 * 1024


def slugify(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", unidecode(title).lower()).strip("-")


async def _slug_taken(db, slug: str) -> bool:
    result = await db.execute(select(Album.id).where(Album.slug == slug))
    return result.first() is not None


async def _photo_count(db, album_id: int) -> int:
    result = await db.execute(select(func.count(Photo.id)).where(Photo.album_id == album_id))
    return result.scalar_one()


# ── Albums ─────────────────────────────────────────────────────────────────────


async def list_albums(request: Request, params: dict[str, str]) -> JSONResponse:
    query = select(Album).order_by(Album.created_at.desc(), Album.id.desc())
    if query_flag(request, "published"):
        query = query.where(Album.published.is_(True))

    async with database.AsyncSessionLocal() as db:
        result = await db.execute(query)
        return JSONResponse([album.to_dict() for album in result.scalars().all()])


async def create_album(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    data = AlbumCreate.model_validate(await read_json(request))
    slug = data.slug or slugify(data.title)
    if not slug:
        raise ValidationError("Could not derive a slug from the title", field="slug")

    async with database.AsyncSessionLocal() as db:
        if await _slug_taken(db, slug):
            raise DuplicateResourceError("Album", "slug", slug)
        album = Album(title=data.title, slug=slug, description=data.description, published=data.published)
        db.add(album)
        await db.commit()
        await db.refresh(album, attribute_names=["photos"])

    logger.info("Album created: %s (id=%s)", album.slug, album.id)
    return JSONResponse(album.to_dict(), status_code=201)


async def get_album(request: Request, params: dict[str, str]) -> JSONResponse:
    album_id = int_param(params, "id", "Album")
    async with database.AsyncSessionLocal() as db:
        album = await db.get(Album, album_id)
        if album is None:
            raise ResourceNotFoundError("Album", album_id)
        return JSONResponse(album.to_dict(include_photos=True))


async def get_album_by_slug(request: Request, params: dict[str, str]) -> JSONResponse:
    slug = params["slug"]
    require_published = request.query_params.get("published") != "false"
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(select(Album).where(Album.slug == slug))
        album = result.scalars().first()
        if album is None or (require_published and not album.published):
            raise ResourceNotFoundError("Album", slug)
        return JSONResponse(album.to_dict(include_photos=True))


async def update_album(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    album_id = int_param(params, "id", "Album")
    data = AlbumUpdate.model_validate(await read_json(request))

    async with database.AsyncSessionLocal() as db:
        album = await db.get(Album, album_id)
        if album is None:
            raise ResourceNotFoundError("Album", album_id)
        if data.slug and data.slug != album.slug and await _slug_taken(db, data.slug):
            raise DuplicateResourceError("Album", "slug", data.slug)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(album, key, value)
        await db.commit()
        await db.refresh(album, attribute_names=["photos"])
        return JSONResponse(album.to_dict())


async def delete_album(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    album_id = int_param(params, "id", "Album")
    async with database.AsyncSessionLocal() as db:
        album = await db.get(Album, album_id)
        if album is None:
            raise ResourceNotFoundError("Album", album_id)
        keys = [photo.storage_key for photo in album.photos]
        await db.delete(album)
        if keys:
            await db.execute(delete(StoredFile).where(StoredFile.key.in_(keys)))
        await db.commit()

    logger.info("Album deleted: id=%s (%d photos)", album_id, len(keys))
    return JSONResponse({"success": True})


# ── Photos ─────────────────────────────────────────────────────────────────────


async def list_album_photos(request: Request, params: dict[str, str]) -> JSONResponse:
    album_id = int_param(params, "id", "Album")
    async with database.AsyncSessionLocal() as db:
        result = await db.execute(select(Photo).where(Photo.album_id == album_id).order_by(Photo.order.asc()))
        return JSONResponse([photo.to_dict() for photo in result.scalars().all()])


async def add_album_photos(request: Request, params: dict[str, str]) -> JSONResponse:
    """Attach photo metadata (one object or a list) to the end of an album."""
    check_admin_key(request)
    album_id = int_param(params, "id", "Album")
    payload = await read_json(request)
    items = payload if isinstance(payload, list) else [payload]
    photos_data = [PhotoCreate.model_validate(item) for item in items]

    async with database.AsyncSessionLocal() as db:
        if await db.get(Album, album_id) is None:
            raise ResourceNotFoundError("Album", album_id)
        start = await _photo_count(db, album_id)
        for index, data in enumerate(photos_data):
            fields = data.model_dump()
            fields["storage_key"] = fields["storage_key"] or uuid.uuid4().hex
            db.add(Photo(album_id=album_id, order=start + index, **fields))
        await db.commit()

    return JSONResponse({"count": len(photos_data)}, status_code=201)


async def reorder_photos(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    album_id = int_param(params, "id", "Album")
    data = PhotoReorder.model_validate(await read_json(request))

    async with database.AsyncSessionLocal() as db, db.begin():
        for position, photo_id in enumerate(data.photo_ids):
            result = await db.execute(
                update(Photo)
                .where(Photo.id == photo_id, Photo.album_id == album_id)
                .values(order=position)
            )
            if result.rowcount == 0:
                # Leaving the block with an exception rolls back every earlier update
                raise ResourceNotFoundError("Photo", photo_id)

    return JSONResponse({"success": True})


async def get_photo(request: Request, params: dict[str, str]) -> JSONResponse:
    photo_id = int_param(params, "photoId", "Photo")
    async with database.AsyncSessionLocal() as db:
        photo = await db.get(Photo, photo_id)
        if photo is None:
            raise ResourceNotFoundError("Photo", photo_id)
        return JSONResponse(photo.to_dict())


async def update_photo(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    photo_id = int_param(params, "photoId", "Photo")
    data = PhotoUpdate.model_validate(await read_json(request))

    async with database.AsyncSessionLocal() as db:
        photo = await db.get(Photo, photo_id)
        if photo is None:
            raise ResourceNotFoundError("Photo", photo_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(photo, key, value)
        await db.commit()
        await db.refresh(photo)
        return JSONResponse(photo.to_dict())


async def delete_photo(request: Request, params: dict[str, str]) -> JSONResponse:
    check_admin_key(request)
    photo_id = int_param(params, "photoId", "Photo")
    async with database.AsyncSessionLocal() as db:
        photo = await db.get(Photo, photo_id)
        if photo is None:
            raise ResourceNotFoundError("Photo", photo_id)
        stored = await db.get(StoredFile, photo.storage_key)
        if stored is not None:
            await db.delete(stored)
        await db.delete(photo)
        await db.commit()

    logger.info("Photo deleted: id=%s", photo_id)
    return JSONResponse({"success": True})


# ── Files ──────────────────────────────────────────────────────────────────────


async def upload_photo(request: Request, params: dict[str, str]) -> JSONResponse:
    """
    Store uploaded images and append them to an album in upload order.

    Multipart form fields: files (one or more), album_id. Files whose
    content type is not image/* are skipped.
    """
    check_admin_key(request)
    async with request.form() as form:
        files = [f for f in form.getlist("files") if isinstance(f, UploadFile)]
        album_id = str(form.get("album_id") or "")
        if not files:
            raise ValidationError("No files provided", field="files")
        if not album_id.isdigit():
            raise ValidationError("Album ID required", field="album_id")

        async with database.AsyncSessionLocal() as db:
            album = await db.get(Album, int(album_id))
            if album is None:
                raise ResourceNotFoundError("Album", int(album_id))

            images = [f for f in files if (f.content_type or "").startswith("image/")]
            if not images:
                raise ValidationError("No valid image files provided", field="files")

            order = await _photo_count(db, album.id)
            photos: list[Photo] = []
            for index, upload in enumerate(images):
                content = await upload.read()
                if len(content) > MAX_UPLOAD_BYTES:
                    raise ValidationError(
                        "File too large",
                        field="files",
                        details={"filename": upload.filename, "max_bytes": MAX_UPLOAD_BYTES},
                    )
                key = uuid.uuid4().hex
                filename = upload.filename or key
                db.add(StoredFile(key=key, filename=filename, mime_type=upload.content_type, size=len(content), data=content))
                photo = Photo(
                    album_id=album.id,
                    storage_key=key,
                    url=f"{FILE_URL_PREFIX}{key}",
                    filename=filename,
                    size=len(content),
                    mime_type=upload.content_type,
                    order=order + index,
                )
                db.add(photo)
                photos.append(photo)
            await db.commit()
            for photo in photos:
                await db.refresh(photo)

    logger.info("Uploaded %d photo(s) to album %s (%d skipped)", len(photos), album.id, len(files) - len(images))
    return JSONResponse(
        {"photos": [photo.to_dict() for photo in photos], "album_id": album.id},
        status_code=201,
    )


async def serve_file(request: Request, params: dict[str, str]) -> Response:
    key = params["key"]
    async with database.AsyncSessionLocal() as db:
        stored = await db.get(StoredFile, key)
        if stored is None:
            raise ResourceNotFoundError("File", key)
        return Response(
            content=stored.data,
            media_type=stored.mime_type,
            headers={"Cache-Control": "public, max-age=31536000, immutable"},
        )
