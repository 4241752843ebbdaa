"""Unit tests for pull_engine module."""

import pytest
from unittest.mock import MagicMock

from src.engine_client.errors import ResourceNotFoundError
from src.site_mapper.errors import TreeBuildError
from src.sync.pull_engine import PullEngine

SITE_HEX = 'a' * 24
INDEX_ID = '000000000000000000000001'
ABOUT_ID = '000000000000000000000002'
TEAM_ID = '000000000000000000000003'
NOT_FOUND_ID = '000000000000000000000004'
POST_ID = '000000000000000000000005'
ASSET_URL = f"/sites/{SITE_HEX}/assets/7/banner.png"

PAGES = [
    {'id': INDEX_ID, 'fullpath': 'index', 'title': 'Home', 'slug': 'index', 'position': 0,
     'raw_template': f'<img src="{ASSET_URL}">', 'translated_in': ['en', 'fr']},
    {'id': NOT_FOUND_ID, 'fullpath': '404', 'title': 'Not found', 'slug': '404', 'position': 1,
     'raw_template': 'Nothing', 'translated_in': ['en']},
    {'id': ABOUT_ID, 'fullpath': 'about-us', 'title': 'About us', 'slug': 'about-us', 'position': 1,
     'parent_id': INDEX_ID, 'raw_template': '{% extends parent %}About', 'translated_in': ['en'],
     'listed': False},
    {'id': TEAM_ID, 'fullpath': 'about-us/team', 'title': 'Team', 'slug': 'team', 'position': 0,
     'parent_id': ABOUT_ID, 'raw_template': 'Team', 'translated_in': ['en', 'fr'],
     'editable_elements': [{'block': 'main', 'slug': 'intro', 'content': 'Hi', 'type': 'EditableText'}]},
]

LOCALIZED_PAGES = {
    INDEX_ID: {'title': 'Accueil', 'slug': 'index', 'raw_template': 'Bonjour'},
    TEAM_ID: {'title': 'Equipe', 'slug': 'equipe', 'raw_template': "L'equipe"},
}


def create_api(site=None):
    """Create a mock engine serving a small two-locale site."""
    api = MagicMock()
    sites = {
        None: site if site is not None else {'id': SITE_HEX, 'name': 'Sample', 'locales': ['en', 'fr'],
                                             'seo_title': 'Sample'},
        'fr': {'seo_title': 'Exemple'},
    }
    api.get_current_site.side_effect = lambda locale=None: sites[locale]
    api.list_content_assets.return_value = [
        {'id': 'b' * 24, 'url': ASSET_URL, 'full_filename': 'banner.png', 'size': 3},
    ]
    api.list_snippets.return_value = [{'id': 'c' * 24, 'slug': 'header', 'name': 'Header', 'template': 'Head'}]
    api.get_snippet.return_value = {'template': 'Tete'}
    api.list_content_types.return_value = [{
        'id': 'd' * 24, 'slug': 'posts', 'name': 'Posts', 'label_field_name': 'title',
        'fields': [
            {'name': 'title', 'type': 'string', 'localized': True},
            {'name': 'cover', 'type': 'file'},
            {'name': 'rating', 'type': 'integer'},
        ],
    }]
    api.list_entries.return_value = [
        {'id': POST_ID, '_slug': 'hello', 'title': 'Hello', 'cover': {'url': ASSET_URL}},
    ]
    api.get_entry.return_value = {'id': POST_ID, 'title': 'Bonjour', 'cover': {'url': ASSET_URL}}
    api.list_pages.return_value = [dict(record) for record in PAGES]
    api.get_page.side_effect = lambda remote_id, locale: dict(LOCALIZED_PAGES[remote_id], id=remote_id)
    api.list_translations.return_value = [{'id': 'e' * 24, 'key': 'welcome', 'values': {'en': 'Welcome'}}]
    return api


class TestPullSite:
    """Test cases for site metadata."""

    def test_site_in_every_locale(self):
        """The site is read in the default locale then translated."""
        mounting_point = PullEngine(create_api()).run()

        site = mounting_point.site
        assert site.locales == ['en', 'fr']
        assert site.remote_id == SITE_HEX
        assert site.get('seo_title', 'fr') == 'Exemple'

    def test_missing_site_raises(self):
        """An engine without site raises ResourceNotFoundError."""
        api = create_api()
        api.get_current_site.side_effect = None
        api.get_current_site.return_value = None

        with pytest.raises(ResourceNotFoundError):
            PullEngine(api).run()


class TestPullPages:
    """Test cases for pages."""

    def test_pages_are_fetched_only_in_translated_locales(self):
        """Other locales are requested only for pages translated in them."""
        api = create_api()

        PullEngine(api).run()

        api.list_pages.assert_called_once_with('en')
        fetched = sorted(call.args for call in api.get_page.call_args_list)
        assert fetched == [(INDEX_ID, 'fr'), (TEAM_ID, 'fr')]

    def test_tree_is_built_from_parent_ids(self):
        """The tree follows the remote parent ids."""
        mounting_point = PullEngine(create_api()).run()

        index = mounting_point.index
        assert [child.fullpath for child in index.children] == ['about-us']
        assert [child.fullpath for child in index.children[0].children] == ['about-us/team']
        assert mounting_point.orphans == []

    def test_localized_attributes(self):
        """Localized titles, slugs and fullpaths are kept per locale."""
        mounting_point = PullEngine(create_api()).run()

        team = mounting_point.pages['about-us/team']
        assert team.get('title', 'fr') == 'Equipe'
        assert team.localized_fullpath('fr') == 'about-us/equipe'
        assert team.translated_in == ['en', 'fr']
        assert team.remote_translated_in == {'en', 'fr'}
        assert mounting_point.pages['about-us'].listed is False
        assert mounting_point.pages['about-us'].layout == 'parent'

    def test_not_found_gets_default_template_in_every_locale(self):
        """The 404 page exists in every locale after the build."""
        mounting_point = PullEngine(create_api()).run()

        assert mounting_point.not_found.get('raw_template', 'fr') == 'Nothing'

    def test_asset_urls_are_localized(self):
        """Engine asset URLs in templates become local paths."""
        mounting_point = PullEngine(create_api()).run()

        assert mounting_point.index.get('raw_template', 'en') == '<img src="/samples/assets/banner.png">'
        assert ASSET_URL in mounting_point.content_assets

    def test_editable_elements_need_data(self):
        """Editable elements are only kept with the data option."""
        without_data = PullEngine(create_api()).run()
        with_data = PullEngine(create_api(), data=True).run()

        assert without_data.pages['about-us/team'].get('editable_elements', 'en') is None
        assert with_data.pages['about-us/team'].get('editable_elements', 'en') == {'main/intro': 'Hi'}

    def test_missing_index_raises(self):
        """An engine without index page cannot be pulled."""
        api = create_api()
        api.list_pages.return_value = [dict(record) for record in PAGES if record['fullpath'] != 'index']

        with pytest.raises(TreeBuildError):
            PullEngine(api).run()


class TestPullResources:
    """Test cases for snippets, content and translations."""

    def test_snippets_in_every_locale(self):
        """Snippets are fetched again in the other locales."""
        api = create_api()

        mounting_point = PullEngine(api).run()

        header = mounting_point.snippets['header']
        assert header.get('template', 'en') == 'Head'
        assert header.get('template', 'fr') == 'Tete'
        api.get_snippet.assert_called_once_with('c' * 24, 'fr')

    def test_unknown_field_types_are_skipped(self):
        """Fields of unsupported types are left out of the content type."""
        mounting_point = PullEngine(create_api()).run()

        posts = mounting_point.content_types['posts']
        assert [content_field.name for content_field in posts.fields] == ['title', 'cover']

    def test_entries_need_data(self):
        """Entries are only pulled with the data option."""
        api = create_api()

        mounting_point = PullEngine(api).run()

        assert mounting_point.content_entries == {}
        api.list_entries.assert_not_called()

    def test_entries_with_localized_values(self):
        """Localized fields are fetched per locale, files become local paths."""
        mounting_point = PullEngine(create_api(), data=True).run()

        hello = mounting_point.find_entry('posts', 'hello')
        assert hello.remote_id == POST_ID
        assert hello.label == 'Hello'
        assert hello.value('title', 'fr') == 'Bonjour'
        assert hello.value('cover', 'en') == '/samples/assets/banner.png'
        assert 'cover' not in hello.values['fr']

    def test_translations(self):
        """Translations are read with their values."""
        mounting_point = PullEngine(create_api()).run()

        assert mounting_point.translations['welcome'].get('en') == 'Welcome'
