"""
Photo Albums Plugin

  - Admin pages for managing albums (list, create, edit)
  - Multi-file photo upload stored as database blobs
  - Public gallery and album pages
  - Homepage section showing recent albums
"""

from cms.plugins.photos import api, pages, translations
from cms.plugins.types import (
    AdminPage,
    ApiRoute,
    HomepageSection,
    NavItem,
    PluginDefinition,
    PublicPage,
    SettingField,
    SettingOption,
)


def photo_icon(class_name: str = "") -> str:
    return (
        f'<svg class="{class_name}" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
        '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
        'd="M4 16l4.586-4.586a2 2 0 012.828 0L16 16m-2-2l1.586-1.586a2 2 0 012.828 0L20 14m-6-6h.01'
        'M6 20h12a2 2 0 002-2V6a2 2 0 00-2-2H6a2 2 0 00-2 2v12a2 2 0 002 2z"/></svg>'
    )


plugin = PluginDefinition(
    id="photos",
    name="Photo Albums",
    description="Create and manage photo albums with uploads, gallery pages and database-backed storage.",
    version="1.0.0",
    author="CMS Team",
    default_public_path="/photos",
    translations={"en": translations.en, "nl": translations.nl},
    admin_navigation=NavItem(name="Photo Albums", href="/admin/p/photos", icon=photo_icon),
    admin_pages=(
        AdminPage(path="", component=pages.album_list_page),
        AdminPage(path="new", component=pages.album_new_page),
        AdminPage(path="[id]", component=pages.album_edit_page),
    ),
    public_pages=(
        PublicPage(path="", component=pages.gallery_page),
        PublicPage(path="[slug]", component=pages.album_view_page),
    ),
    # After concerts on the homepage
    homepage_section=HomepageSection(priority=5, component=pages.photos_homepage_section),
    api_routes=(
        ApiRoute(path="", GET=api.list_albums, POST=api.create_album),
        ApiRoute(path="upload", POST=api.upload_photo),
        ApiRoute(path="file/[key]", GET=api.serve_file),
        ApiRoute(path="album/[slug]", GET=api.get_album_by_slug),
        ApiRoute(path="photo/[photoId]", GET=api.get_photo, PUT=api.update_photo, DELETE=api.delete_photo),
        ApiRoute(path="[id]/photos", GET=api.list_album_photos, POST=api.add_album_photos),
        ApiRoute(path="[id]/reorder", PUT=api.reorder_photos),
        ApiRoute(path="[id]", GET=api.get_album, PUT=api.update_album, DELETE=api.delete_album),
    ),
    settings_fields=(
        SettingField(
            key="grid_columns",
            label="Gallery columns",
            type="select",
            default="3",
            options=(
                SettingOption(label="Two", value="2"),
                SettingOption(label="Three", value="3"),
                SettingOption(label="Four", value="4"),
            ),
        ),
    ),
)
