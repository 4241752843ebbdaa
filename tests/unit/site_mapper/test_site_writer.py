"""Unit tests for site_writer module."""

import os
from unittest.mock import Mock, patch

import pytest

from src.models.content_asset import ContentAsset
from src.site_mapper.errors import FilesystemError
from src.site_mapper.site_reader import SiteReader
from src.site_mapper.site_writer import SiteWriter


def read_file(*parts):
    with open(os.path.join(*parts), 'r', encoding='utf-8') as f:
        return f.read()


class TestWritePages:
    """Test cases for page templates."""

    def test_writes_one_template_per_locale(self, simple_site, tmp_path):
        """Each translated locale of a page gets its own template."""
        mounting_point = SiteReader(simple_site).read()
        target = str(tmp_path / 'out')

        SiteWriter(mounting_point, target).write()

        pages_dir = os.path.join(target, 'app', 'views', 'pages')
        assert os.path.isfile(os.path.join(pages_dir, 'index.liquid'))
        assert os.path.isfile(os.path.join(pages_dir, 'index.fr.liquid'))
        assert os.path.isfile(os.path.join(pages_dir, 'about-us', 'team.fr.liquid'))
        assert not os.path.exists(os.path.join(pages_dir, 'about-us.fr.liquid'))

    def test_header_holds_localized_slug(self, simple_site, tmp_path):
        """The header keeps the localized slug and title."""
        mounting_point = SiteReader(simple_site).read()
        target = str(tmp_path / 'out')

        SiteWriter(mounting_point, target).write()

        content = read_file(target, 'app', 'views', 'pages', 'about-us', 'team.fr.liquid')
        assert content.startswith('---\n')
        assert 'title: Equipe' in content
        assert 'slug: equipe' in content
        assert content.endswith("L'equipe\n")

    def test_round_trip(self, simple_site, tmp_path):
        """A written site reads back to the same tree."""
        original = SiteReader(simple_site).read()
        target = str(tmp_path / 'out')

        SiteWriter(original, target).write()
        copy = SiteReader(target).read()

        assert set(copy.pages) == set(original.pages)
        assert [page.fullpath for page in copy.walk_pages()] == [page.fullpath for page in original.walk_pages()]
        assert copy.pages['about-us/team'].localized_fullpath('fr') == 'about-us/equipe'
        assert copy.pages['index'].get('title', 'fr') == 'Accueil'
        assert copy.pages['about-us'].layout == 'parent'
        assert copy.snippets['header'].get('template', 'en') == original.snippets['header'].get('template', 'en')
        assert copy.site.get('seo_title', 'fr') == 'Exemple'

    def test_snippet_translation_equal_to_default_is_not_written(self, simple_site, tmp_path):
        """A snippet locale reusing the default source has no file of its own."""
        mounting_point = SiteReader(simple_site).read()
        target = str(tmp_path / 'out')

        SiteWriter(mounting_point, target).write()

        snippets_dir = os.path.join(target, 'app', 'views', 'snippets')
        assert sorted(os.listdir(snippets_dir)) == ['header.liquid']


class TestWriteContent:
    """Test cases for content types and entries."""

    def test_content_round_trip(self, content_site, tmp_path):
        """Content types and entries read back with their localized values."""
        original = SiteReader(content_site).read()
        target = str(tmp_path / 'out')

        SiteWriter(original, target).write()
        copy = SiteReader(target).read()

        assert copy.content_types['posts'].find_field('author').class_name == 'authors'
        hello = copy.find_entry('posts', 'hello_world')
        assert hello.value('title', 'fr') == 'Bonjour le monde'
        assert hello.value('author', 'en') == 'jane_doe'
        assert copy.find_entry('posts', 'second_post').value('title', 'en') == 'Second post'
        assert copy.find_entry('authors', 'jane_doe').value('name', 'en') == 'Jane Doe'


class TestWriteAssets:
    """Test cases for content asset downloads."""

    def test_downloads_assets(self, simple_site, tmp_path):
        """Registered assets are downloaded below public/."""
        mounting_point = SiteReader(simple_site).read()
        url = f"/sites/{'a' * 24}/assets/1/banner.png"
        mounting_point.register_asset(ContentAsset.from_remote_url(url))
        downloader = Mock(return_value=b'PNG')
        target = str(tmp_path / 'out')

        SiteWriter(mounting_point, target, downloader).write()

        downloader.assert_called_once_with(url)
        with open(os.path.join(target, 'public', 'samples', 'assets', 'banner.png'), 'rb') as f:
            assert f.read() == b'PNG'

    def test_failed_download_is_recorded(self, simple_site, tmp_path):
        """A failed download is recorded and the other files are still written."""
        mounting_point = SiteReader(simple_site).read()
        url = f"/sites/{'a' * 24}/assets/1/banner.png"
        mounting_point.register_asset(ContentAsset.from_remote_url(url))
        target = str(tmp_path / 'out')

        writer = SiteWriter(mounting_point, target, Mock(side_effect=IOError("boom")))
        writer.write()

        assert writer.failed_assets == [url]
        assert os.path.isfile(os.path.join(target, 'config', 'site.yml'))

    def test_no_downloader_skips_assets(self, simple_site, tmp_path):
        """Without downloader no asset is written."""
        mounting_point = SiteReader(simple_site).read()
        mounting_point.register_asset(ContentAsset.from_remote_url(f"/sites/{'a' * 24}/assets/1/banner.png"))
        target = str(tmp_path / 'out')

        SiteWriter(mounting_point, target).write()

        assert not os.path.exists(os.path.join(target, 'public'))


class TestAtomicWrite:
    """Test cases for the two-phase write."""

    def test_path_outside_site_is_rejected(self, tmp_path):
        """Files resolving outside of the site directory are refused."""
        writer = SiteWriter(Mock(), str(tmp_path / 'site'))

        with pytest.raises(FilesystemError) as exc_info:
            writer._write_files_atomic([(str(tmp_path / 'elsewhere.txt'), 'x')])

        assert 'Path traversal' in str(exc_info.value)
        assert not os.path.exists(str(tmp_path / 'elsewhere.txt'))

    def test_temp_directory_is_removed(self, tmp_path):
        """No staging directory is left behind."""
        site_path = str(tmp_path / 'site')
        writer = SiteWriter(Mock(), site_path)

        writer._write_files_atomic([(os.path.join(site_path, 'a', 'b.txt'), 'hello')])

        assert os.listdir(site_path) == ['a']
        assert read_file(site_path, 'a', 'b.txt') == 'hello'

    def test_phase_two_failure_raises(self, tmp_path):
        """A failing move raises FilesystemError."""
        site_path = str(tmp_path / 'site')
        writer = SiteWriter(Mock(), site_path)

        with patch('src.site_mapper.site_writer.shutil.move', side_effect=OSError("disk full")):
            with pytest.raises(FilesystemError) as exc_info:
                writer._write_files_atomic([(os.path.join(site_path, 'b.txt'), 'hello')])

        assert exc_info.value.operation == 'move'
