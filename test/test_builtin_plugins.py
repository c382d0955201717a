"""
Built-in plugin tests

Definitions of the concerts and photos plugins, and their API routes and
pages running against a SQLite database.
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest
from utils.plugins import enable

from cms.plugins.validation import validate_plugin_fully


def _definition(module_path: str):
    from cms.plugins.modules import import_factory

    return asyncio.run(import_factory(module_path)())


# ══════════════════════════════════════════════════════════════════════════════
# 1. Definitions
# ══════════════════════════════════════════════════════════════════════════════


class TestBuiltinDefinitions:
    @pytest.mark.parametrize("module_path", ["cms.plugins.concerts", "cms.plugins.photos"])
    def test_definition_is_valid(self, module_path):
        result = validate_plugin_fully(_definition(module_path))
        assert result.valid is True, result.errors
        # every locale declares the same keys
        assert not [w for w in result.warnings if "Translation" in w]

    def test_concerts_metadata(self):
        plugin = _definition("cms.plugins.concerts")
        assert plugin.default_public_path == "/concerts"
        assert plugin.homepage_section.priority == 10
        assert [p.path for p in plugin.admin_pages] == ["", "new", "[id]"]
        assert [r.path for r in plugin.api_routes] == ["", "[id]"]

    def test_photos_metadata(self):
        plugin = _definition("cms.plugins.photos")
        assert plugin.default_public_path == "/photos"
        assert plugin.homepage_section.priority == 5
        assert [p.path for p in plugin.public_pages] == ["", "[slug]"]
        assert [r.path for r in plugin.api_routes] == [
            "",
            "upload",
            "file/[key]",
            "album/[slug]",
            "photo/[photoId]",
            "[id]/photos",
            "[id]/reorder",
            "[id]",
        ]

    def test_nav_names_are_translated(self):
        for module_path in ("cms.plugins.concerts", "cms.plugins.photos"):
            plugin = _definition(module_path)
            for locale in ("en", "nl"):
                assert plugin.translations[locale][plugin.id]["navName"]


# ══════════════════════════════════════════════════════════════════════════════
# 2. Concerts
# ══════════════════════════════════════════════════════════════════════════════


def _concert(title: str, days: int, published: bool = True) -> dict:
    return {
        "title": title,
        "venue": "Paradiso",
        "city": "Amsterdam",
        "date": (date.today() + timedelta(days=days)).isoformat(),
        "published": published,
    }


class TestConcertsPlugin:
    @pytest.fixture
    def concerts_client(self, client):
        enable(client, "concerts")
        return client

    def test_crud(self, concerts_client):
        created = concerts_client.post("/api/p/concerts", json=_concert("Summer Tour", 10))
        assert created.status_code == 201
        concert_id = created.json()["id"]

        assert concerts_client.get(f"/api/p/concerts/{concert_id}").json()["title"] == "Summer Tour"

        updated = concerts_client.put(f"/api/p/concerts/{concert_id}", json={"city": "Utrecht"})
        assert updated.json()["city"] == "Utrecht"
        assert updated.json()["venue"] == "Paradiso"

        assert concerts_client.delete(f"/api/p/concerts/{concert_id}").json() == {"success": True}
        assert concerts_client.get(f"/api/p/concerts/{concert_id}").status_code == 404

    def test_list_published_filter(self, concerts_client):
        concerts_client.post("/api/p/concerts", json=_concert("Public", 5))
        concerts_client.post("/api/p/concerts", json=_concert("Draft", 6, published=False))
        assert len(concerts_client.get("/api/p/concerts").json()) == 2
        published = concerts_client.get("/api/p/concerts", params={"published": "true"}).json()
        assert [c["title"] for c in published] == ["Public"]

    def test_invalid_payload(self, concerts_client):
        response = concerts_client.post("/api/p/concerts", json={"title": "No venue"})
        assert response.status_code == 422

    @pytest.mark.parametrize("field", ["title", "venue", "city", "date", "published"])
    def test_update_cannot_clear_required_field(self, concerts_client, field):
        concert_id = concerts_client.post("/api/p/concerts", json=_concert("Summer Tour", 10)).json()["id"]
        response = concerts_client.put(f"/api/p/concerts/{concert_id}", json={field: None})
        assert response.status_code == 422
        assert concerts_client.get(f"/api/p/concerts/{concert_id}").json()["title"] == "Summer Tour"

    def test_update_can_clear_optional_field(self, concerts_client):
        payload = {**_concert("Summer Tour", 10), "description": "Outdoor"}
        concert_id = concerts_client.post("/api/p/concerts", json=payload).json()["id"]
        response = concerts_client.put(f"/api/p/concerts/{concert_id}", json={"description": None})
        assert response.status_code == 200
        assert response.json()["description"] is None

    def test_non_numeric_id_is_404(self, concerts_client):
        assert concerts_client.get("/api/p/concerts/abc").status_code == 404

    def test_method_not_allowed(self, concerts_client):
        response = concerts_client.patch("/api/p/concerts/1", json={})
        assert response.status_code == 405
        assert response.headers["allow"] == "GET, PUT, DELETE"

    def test_public_page_and_homepage(self, concerts_client):
        concerts_client.post("/api/p/concerts", json=_concert("Upcoming Show", 3))
        concerts_client.post("/api/p/concerts", json=_concert("Old Show", -30))

        page = concerts_client.get("/concerts")
        assert page.status_code == 200
        assert "Upcoming Show" in page.text
        assert "Old Show" in page.text

        homepage = concerts_client.get("/")
        assert "Upcoming Show" in homepage.text
        assert "Old Show" not in homepage.text

    def test_show_past_setting(self, concerts_client):
        concerts_client.post("/api/p/concerts", json=_concert("Old Show", -30))
        concerts_client.post(
            "/api/admin/plugins",
            json={"action": "updateSettings", "plugin_id": "concerts", "settings": {"show_past": False}},
        )
        assert "Old Show" not in concerts_client.get("/concerts").text

    def test_admin_pages(self, concerts_client):
        concert_id = concerts_client.post("/api/p/concerts", json=_concert("Summer Tour", 10)).json()["id"]
        assert "Summer Tour" in concerts_client.get("/admin/p/concerts").text
        assert concerts_client.get("/admin/p/concerts/new").status_code == 200
        assert "Summer Tour" in concerts_client.get(f"/admin/p/concerts/{concert_id}").text
        assert concerts_client.get("/admin/p/concerts/999").status_code == 404

    def test_disabled_concerts(self, client):
        assert client.get("/api/p/concerts").status_code == 403
        assert client.get("/concerts").status_code == 404


# ══════════════════════════════════════════════════════════════════════════════
# 3. Photos
# ══════════════════════════════════════════════════════════════════════════════


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class TestPhotosPlugin:
    @pytest.fixture
    def photos_client(self, client):
        enable(client, "photos")
        return client

    def _album(self, client, title="Summer 2024", published=True) -> dict:
        response = client.post("/api/p/photos", json={"title": title, "published": published})
        assert response.status_code == 201, response.text
        return response.json()

    def _post_files(self, client, album_id, files):
        return client.post(
            "/api/p/photos/upload",
            data={"album_id": str(album_id)},
            files=[("files", f) for f in files],
        )

    def _upload(self, client, album_id, filename="a.png") -> dict:
        response = self._post_files(client, album_id, [(filename, PNG_BYTES, "image/png")])
        assert response.status_code == 201, response.text
        return response.json()["photos"][0]

    def test_create_album_generates_slug(self, photos_client):
        album = self._album(photos_client, "Summer 2024!")
        assert album["slug"] == "summer-2024"
        assert album["photo_count"] == 0

    def test_slug_transliterates_accents(self, photos_client):
        assert self._album(photos_client, "Café Été")["slug"] == "cafe-ete"

    def test_duplicate_slug(self, photos_client):
        self._album(photos_client)
        response = photos_client.post("/api/p/photos", json={"title": "Summer 2024"})
        assert response.status_code == 409

    def test_update_album_cannot_clear_title_or_slug(self, photos_client):
        album = self._album(photos_client)
        for payload in ({"title": None}, {"slug": None}):
            response = photos_client.put(f"/api/p/photos/{album['id']}", json=payload)
            assert response.status_code == 422
        assert photos_client.get(f"/api/p/photos/{album['id']}").json()["slug"] == "summer-2024"

    def test_upload_and_serve_file(self, photos_client):
        album = self._album(photos_client)
        photo = self._upload(photos_client, album["id"])
        assert photo["url"].startswith("/api/p/photos/file/")
        assert photo["filename"] == "a.png"

        served = photos_client.get(photo["url"])
        assert served.status_code == 200
        assert served.content == PNG_BYTES
        assert served.headers["content-type"] == "image/png"

        detail = photos_client.get(f"/api/p/photos/{album['id']}").json()
        assert detail["photo_count"] == 1
        assert detail["cover_image"] == photo["url"]

    def test_upload_several_files_keeps_order_and_skips_non_images(self, photos_client):
        album = self._album(photos_client)
        self._upload(photos_client, album["id"], "0.png")

        response = self._post_files(
            photos_client,
            album["id"],
            [
                ("1.png", PNG_BYTES, "image/png"),
                ("notes.txt", b"hello", "text/plain"),
                ("2.jpg", b"\xff\xd8\xff", "image/jpeg"),
            ],
        )
        assert response.status_code == 201
        body = response.json()
        assert body["album_id"] == album["id"]
        assert [p["filename"] for p in body["photos"]] == ["1.png", "2.jpg"]

        photos = photos_client.get(f"/api/p/photos/{album['id']}/photos").json()
        assert [p["filename"] for p in photos] == ["0.png", "1.png", "2.jpg"]
        assert [p["order"] for p in photos] == [0, 1, 2]

    def test_upload_is_not_shadowed_by_album_route(self, photos_client):
        # "upload" is declared before "[id]"; GET has no handler there
        response = photos_client.get("/api/p/photos/upload")
        assert response.status_code == 405
        assert response.headers["allow"] == "POST"

    def test_upload_rejects_only_non_images(self, photos_client):
        album = self._album(photos_client)
        response = self._post_files(photos_client, album["id"], [("notes.txt", b"hello", "text/plain")])
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No valid image files provided"

    def test_upload_requires_files(self, photos_client):
        album = self._album(photos_client)
        response = photos_client.post("/api/p/photos/upload", data={"album_id": str(album["id"])})
        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "files"

    def test_upload_requires_album_id(self, photos_client):
        response = photos_client.post(
            "/api/p/photos/upload", files=[("files", ("a.png", PNG_BYTES, "image/png"))]
        )
        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "album_id"

    def test_upload_requires_existing_album(self, photos_client):
        response = self._post_files(photos_client, 999, [("a.png", PNG_BYTES, "image/png")])
        assert response.status_code == 404

    def test_missing_file(self, photos_client):
        assert photos_client.get("/api/p/photos/file/nope").status_code == 404

    def test_reorder(self, photos_client):
        album = self._album(photos_client)
        first = self._upload(photos_client, album["id"], "1.png")
        second = self._upload(photos_client, album["id"], "2.png")

        response = photos_client.put(
            f"/api/p/photos/{album['id']}/reorder", json={"photo_ids": [second["id"], first["id"]]}
        )
        assert response.status_code == 200
        photos = photos_client.get(f"/api/p/photos/{album['id']}/photos").json()
        assert [p["id"] for p in photos] == [second["id"], first["id"]]

    def test_reorder_with_foreign_photo_changes_nothing(self, photos_client):
        album = self._album(photos_client)
        other = self._album(photos_client, "Other")
        first = self._upload(photos_client, album["id"], "1.png")
        second = self._upload(photos_client, album["id"], "2.png")
        foreign = self._upload(photos_client, other["id"], "x.png")

        response = photos_client.put(
            f"/api/p/photos/{album['id']}/reorder",
            json={"photo_ids": [second["id"], first["id"], foreign["id"]]},
        )
        assert response.status_code == 404
        photos = photos_client.get(f"/api/p/photos/{album['id']}/photos").json()
        assert [p["id"] for p in photos] == [first["id"], second["id"]]

    def test_add_photo_metadata(self, photos_client):
        album = self._album(photos_client)
        response = photos_client.post(
            f"/api/p/photos/{album['id']}/photos",
            json=[{"url": "https://cdn.example.com/1.jpg", "filename": "1.jpg"}, {"url": "https://cdn.example.com/2.jpg", "filename": "2.jpg"}],
        )
        assert response.json() == {"count": 2}
        photos = photos_client.get(f"/api/p/photos/{album['id']}/photos").json()
        assert [p["order"] for p in photos] == [0, 1]

    def test_photo_update_and_delete(self, photos_client):
        album = self._album(photos_client)
        photo = self._upload(photos_client, album["id"])

        updated = photos_client.put(f"/api/p/photos/photo/{photo['id']}", json={"caption": "Sunset"})
        assert updated.json()["caption"] == "Sunset"
        cleared = photos_client.put(f"/api/p/photos/photo/{photo['id']}", json={"order": None})
        assert cleared.status_code == 422

        assert photos_client.delete(f"/api/p/photos/photo/{photo['id']}").json() == {"success": True}
        assert photos_client.get(f"/api/p/photos/photo/{photo['id']}").status_code == 404
        assert photos_client.get(photo["url"]).status_code == 404

    def test_album_by_slug_respects_published(self, photos_client):
        self._album(photos_client, "Hidden", published=False)
        assert photos_client.get("/api/p/photos/album/hidden").status_code == 404
        response = photos_client.get("/api/p/photos/album/hidden", params={"published": "false"})
        assert response.json()["title"] == "Hidden"

    def test_update_and_delete_album(self, photos_client):
        album = self._album(photos_client)
        self._upload(photos_client, album["id"])
        updated = photos_client.put(f"/api/p/photos/{album['id']}", json={"title": "Renamed"})
        assert updated.json()["title"] == "Renamed"

        assert photos_client.delete(f"/api/p/photos/{album['id']}").json() == {"success": True}
        assert photos_client.get(f"/api/p/photos/{album['id']}").status_code == 404

    def test_gallery_and_album_pages(self, photos_client):
        self._album(photos_client, "Public Album")
        self._album(photos_client, "Draft Album", published=False)

        gallery = photos_client.get("/photos")
        assert "Public Album" in gallery.text
        assert "Draft Album" not in gallery.text

        assert "Public Album" in photos_client.get("/photos/public-album").text
        assert photos_client.get("/photos/draft-album").status_code == 404

    def test_custom_public_path(self, client):
        enable(client, "photos", "/gallery")
        self._album(client, "Public Album")
        assert "Public Album" in client.get("/gallery/public-album").text
        assert client.get("/photos").status_code == 404

    def test_admin_pages(self, photos_client):
        album = self._album(photos_client, "Public Album")
        assert "Public Album" in photos_client.get("/admin/p/photos").text
        assert "Public Album" in photos_client.get(f"/admin/p/photos/{album['id']}").text
        assert photos_client.get("/admin/p/photos/new").status_code == 200
