"""Unit tests for site, snippet, translation and content models."""

import pytest

from src.models.content_asset import ContentAsset
from src.models.content_entry import ContentEntry
from src.models.content_type import ContentField, ContentType, FieldKind
from src.models.mounting_point import MountingPoint
from src.models.page import Page
from src.models.site import Site
from src.models.snippet import Snippet
from src.models.translation import Translation


class TestFieldKind:
    """Test cases for FieldKind."""

    def test_parse_is_case_insensitive(self):
        """Kinds are parsed regardless of case and surrounding spaces."""
        assert FieldKind.parse(' Belongs_To ') is FieldKind.BELONGS_TO

    def test_parse_unknown_kind_raises(self):
        """Unknown kinds raise ValueError listing the known ones."""
        with pytest.raises(ValueError) as exc_info:
            FieldKind.parse('integer')

        assert 'integer' in str(exc_info.value)
        assert 'many_to_many' in str(exc_info.value)

    def test_relationship_kinds(self):
        """Only belongs_to and many_to_many are relationships."""
        assert FieldKind.BELONGS_TO.is_relationship
        assert FieldKind.MANY_TO_MANY.is_relationship
        assert not FieldKind.FILE.is_relationship


class TestContentType:
    """Test cases for ContentType."""

    def make_posts(self):
        return ContentType(
            slug='posts',
            name='Posts',
            fields=[
                ContentField(name='title', kind=FieldKind.STRING, localized=True),
                ContentField(name='category', kind=FieldKind.SELECT, select_options=['news', 'blog'], position=1),
                ContentField(name='author', kind=FieldKind.BELONGS_TO, class_name='authors', position=2),
            ],
        )

    def test_label_field_defaults_to_first_field(self):
        """Without label_field_name the first field labels entries."""
        assert self.make_posts().label_field == 'title'

    def test_relationship_fields(self):
        """relationship_fields lists relationship kinds only."""
        assert [f.name for f in self.make_posts().relationship_fields] == ['author']

    def test_to_params(self):
        """Field params carry type, generated label and select options."""
        params = self.make_posts().to_params()

        assert params['slug'] == 'posts'
        title, category, author = params['fields']
        assert title['type'] == 'string'
        assert title['label'] == 'Title'
        assert title['localized'] is True
        assert category['select_options'] == [
            {'name': 'news', 'position': 0},
            {'name': 'blog', 'position': 1},
        ]
        assert author['class_name'] == 'authors'


class TestContentEntry:
    """Test cases for ContentEntry values."""

    def test_value_falls_back_to_default_locale(self):
        """A locale without its own value reads the default locale one."""
        entry = ContentEntry(content_type='posts', slug='hello', default_locale='en')
        entry.set_value('published_on', '2024-01-15', 'en')
        entry.set_value('title', 'Bonjour', 'fr')

        assert entry.value('published_on', 'fr') == '2024-01-15'
        assert entry.value('title', 'fr') == 'Bonjour'
        assert entry.value('title', 'en') is None

    def test_translated_in(self):
        """Only locales holding values count as translated."""
        entry = ContentEntry(content_type='posts', slug='hello', default_locale='en')
        entry.set_value('title', 'Hello', 'en')

        assert entry.translated_in == ['en']
        assert entry.is_translated_in('en')
        assert not entry.is_translated_in('fr')


class TestSnippet:
    """Test cases for Snippet."""

    def test_default_template_fills_missing_locales(self):
        """The default source is copied to locales without one."""
        snippet = Snippet(slug='header')
        snippet.set('template', '<header/>', 'en')

        snippet.set_default_template_for_each_locale('en', ['en', 'fr'])

        assert snippet.get('template', 'fr') == '<header/>'
        assert snippet.translated_in == ['en', 'fr']


class TestSiteAndTranslation:
    """Test cases for Site and Translation."""

    def test_default_locale_is_first(self):
        """The first locale is the default one."""
        assert Site(name='Sample', locales=['fr', 'en']).default_locale == 'fr'
        assert Site(name='Empty').default_locale is None

    def test_site_params_in_locale(self):
        """to_params includes the SEO values of the locale and drops None."""
        site = Site(name='Sample', locales=['en', 'fr'])
        site.set('seo_title', 'Exemple', 'fr')

        params = site.to_params('fr')

        assert params['seo_title'] == 'Exemple'
        assert params['locales'] == ['en', 'fr']
        assert 'timezone' not in params

    def test_translation_params(self):
        """Translations send every locale in one payload."""
        translation = Translation(key='welcome', values={'en': 'Welcome', 'fr': 'Bienvenue'})

        assert translation.get('fr') == 'Bienvenue'
        assert translation.to_params() == {'key': 'welcome', 'values': {'en': 'Welcome', 'fr': 'Bienvenue'}}


class TestContentAsset:
    """Test cases for ContentAsset."""

    def test_from_remote_url(self):
        """Remote URLs map to the pulled assets folder, query string dropped."""
        asset = ContentAsset.from_remote_url(f"/sites/{'a' * 24}/assets/1/banner.png?1700000000")

        assert asset.local_path == '/samples/assets/banner.png'
        assert asset.filename == 'banner.png'

    def test_absolute_path_is_below_public(self, tmp_path):
        """Local assets live under the public folder of the site."""
        asset = ContentAsset(local_path='/samples/photo.png')
        (tmp_path / 'public' / 'samples').mkdir(parents=True)
        (tmp_path / 'public' / 'samples' / 'photo.png').write_bytes(b'png')

        assert asset.absolute_path(str(tmp_path)).endswith('photo.png')
        assert asset.exists(str(tmp_path))
        assert not ContentAsset(local_path='/samples/missing.png').exists(str(tmp_path))


class TestMountingPoint:
    """Test cases for MountingPoint."""

    def test_locales_come_from_site(self):
        """Locales and default locale are read from the site."""
        mounting_point = MountingPoint(site=Site(name='Sample', locales=['en', 'fr']))

        assert mounting_point.locales == ['en', 'fr']
        assert mounting_point.default_locale == 'en'

    def test_walk_pages_covers_both_roots(self):
        """walk_pages yields the index tree then 404."""
        mounting_point = MountingPoint(site=Site(name='Sample', locales=['en']))
        index = mounting_point.add_page(Page(fullpath='index'))
        not_found = mounting_point.add_page(Page(fullpath='404'))
        about = index.add_child(mounting_point.add_page(Page(fullpath='about-us')))

        assert list(mounting_point.walk_pages()) == [index, about, not_found]

    def test_register_asset_keeps_first(self):
        """An asset already registered under a URL wins."""
        mounting_point = MountingPoint(site=Site(name='Sample', locales=['en']))
        first = mounting_point.register_asset(ContentAsset(local_path='/samples/a.png', url='/x/a.png'))
        second = mounting_point.register_asset(ContentAsset(local_path='/samples/b.png', url='/x/a.png'))

        assert second is first

    def test_entries(self):
        """Entries are grouped by content type and found by slug."""
        mounting_point = MountingPoint(site=Site(name='Sample', locales=['en']))
        entry = mounting_point.add_entry(ContentEntry(content_type='authors', slug='jane_doe'))

        assert mounting_point.find_entry('authors', 'jane_doe') is entry
        assert mounting_point.find_entry('authors', 'john') is None
        assert mounting_point.entries_of('authors') == [entry]
        assert list(mounting_point.all_entries()) == [entry]
