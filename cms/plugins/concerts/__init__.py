"""
Concerts Plugin

Concert/event management:
  - Admin pages for managing concerts (list, create, edit)
  - Public page listing upcoming and past concerts
  - Homepage section showing upcoming concerts
  - API routes for CRUD operations
"""

from cms.plugins.concerts import api, pages, translations
from cms.plugins.types import (
    AdminPage,
    ApiRoute,
    HomepageSection,
    NavItem,
    PluginDefinition,
    PublicPage,
    SettingField,
)


def calendar_icon(class_name: str = "") -> str:
    return (
        f'<svg class="{class_name}" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
        '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
        'd="M8 7V3m8 4V3m-9 8h10M5 21h14a2 2 0 002-2V7a2 2 0 00-2-2H5a2 2 0 00-2 2v12a2 2 0 002 2z"/></svg>'
    )


plugin = PluginDefinition(
    id="concerts",
    name="Concerts",
    description="Manage concerts, shows, and events with venue information, dates, and ticket links.",
    version="1.0.0",
    author="CMS Team",
    default_public_path="/concerts",
    translations={"en": translations.en, "nl": translations.nl},
    admin_navigation=NavItem(name="Concerts", href="/admin/p/concerts", icon=calendar_icon),
    admin_pages=(
        AdminPage(path="", component=pages.concert_list_page),
        AdminPage(path="new", component=pages.concert_new_page),
        AdminPage(path="[id]", component=pages.concert_edit_page),
    ),
    public_pages=(PublicPage(path="", component=pages.concert_public_page),),
    homepage_section=HomepageSection(priority=10, component=pages.concerts_homepage_section),
    api_routes=(
        ApiRoute(path="", GET=api.list_concerts, POST=api.create_concert),
        ApiRoute(path="[id]", GET=api.get_concert, PUT=api.update_concert, DELETE=api.delete_concert),
    ),
    settings_fields=(
        SettingField(key="show_past", label="Show past concerts", type="boolean", default=True),
    ),
)
