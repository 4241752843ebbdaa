"""Unit tests for config_loader module."""

import os

import pytest
import yaml

from src.models.site import Site
from src.site_mapper.config_loader import ConfigLoader
from src.site_mapper.errors import ConfigError, FilesystemError
from tests.fixtures.sample_sites import write_site


class TestLoadSite:
    """Test cases for ConfigLoader.load_site."""

    def test_loads_site(self, tmp_path):
        """Name, locales, domains and SEO values are read."""
        site_path = write_site(str(tmp_path), {
            'config/site.yml': (
                "name: Sample\n"
                "locales: [en, fr]\n"
                "subdomain: sample\n"
                "domains: [www.example.com]\n"
                "seo_title:\n  en: Sample\n  fr: Exemple\n"
                "meta_description: A sample site\n"
            ),
        })

        site = ConfigLoader.load_site(site_path).site

        assert site.name == 'Sample'
        assert site.locales == ['en', 'fr']
        assert site.subdomain == 'sample'
        assert site.domains == ['www.example.com']
        assert site.get('seo_title', 'fr') == 'Exemple'
        assert site.get('meta_description', 'en') == 'A sample site'

    def test_single_locale_string(self, tmp_path):
        """A single locale may be given as a string."""
        site_path = write_site(str(tmp_path), {'config/site.yml': "locales: en\n"})

        assert ConfigLoader.load_site(site_path).site.locales == ['en']

    def test_name_defaults_to_directory(self, tmp_path):
        """Without name the directory name is used."""
        site_path = write_site(str(tmp_path / 'my-site'), {'config/site.yml': "locales: [en]\n"})

        assert ConfigLoader.load_site(site_path).site.name == 'my-site'

    def test_missing_locales_raises(self, tmp_path):
        """At least one locale is required."""
        site_path = write_site(str(tmp_path), {'config/site.yml': "name: Sample\nlocales: []\n"})

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load_site(site_path)

        assert exc_info.value.config_field == 'locales'

    def test_missing_file_raises(self, tmp_path):
        """A site directory without config/site.yml raises ConfigError."""
        with pytest.raises(ConfigError):
            ConfigLoader.load_site(str(tmp_path))

    def test_missing_directory_raises(self, tmp_path):
        """A missing site directory raises ConfigError."""
        with pytest.raises(ConfigError):
            ConfigLoader.load_site(str(tmp_path / 'nope'))

    def test_invalid_yaml_raises(self, tmp_path):
        """Malformed YAML raises ConfigError."""
        site_path = write_site(str(tmp_path), {'config/site.yml': "locales: [en\n"})

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load_site(site_path)

        assert 'Invalid YAML syntax' in str(exc_info.value)

    def test_non_mapping_raises(self, tmp_path):
        """site.yml must be a mapping."""
        site_path = write_site(str(tmp_path), {'config/site.yml': "- en\n- fr\n"})

        with pytest.raises(ConfigError):
            ConfigLoader.load_site(site_path)

    def test_pages_list(self, tmp_path):
        """The pages list keeps its order and dasherizes fullpaths."""
        site_path = write_site(str(tmp_path), {
            'config/site.yml': (
                "locales: [en]\n"
                "pages:\n"
                "  - About_Us:\n"
                "      listed: false\n"
                "  - contact\n"
            ),
        })

        pages = ConfigLoader.load_site(site_path).pages

        assert pages == [('about-us', {'listed': False}), ('contact', {})]

    def test_invalid_pages_entry_raises(self, tmp_path):
        """Page entries must be a fullpath or a single-key mapping."""
        site_path = write_site(str(tmp_path), {
            'config/site.yml': "locales: [en]\npages:\n  - {a: 1, b: 2}\n",
        })

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load_site(site_path)

        assert exc_info.value.config_field == 'pages[0]'


class TestLoadDeploy:
    """Test cases for ConfigLoader.load_deploy."""

    def test_returns_environment_settings(self, tmp_path):
        """Only the known connection fields of the environment are returned."""
        site_path = write_site(str(tmp_path), {
            'config/deploy.yml': (
                "production:\n"
                "  host: example.com\n"
                "  email: admin@example.com\n"
                "  api_key: secret\n"
                "  extra: ignored\n"
                "staging:\n"
                "  host: staging.example.com\n"
            ),
        })

        settings = ConfigLoader.load_deploy(site_path, 'production')

        assert settings == {'host': 'example.com', 'email': 'admin@example.com', 'api_key': 'secret'}

    def test_missing_file_or_environment(self, tmp_path):
        """A missing file or environment returns None."""
        assert ConfigLoader.load_deploy(str(tmp_path), 'production') is None

        site_path = write_site(str(tmp_path), {'config/deploy.yml': "staging:\n  host: x\n"})
        assert ConfigLoader.load_deploy(site_path, 'production') is None

    def test_invalid_environment_raises(self, tmp_path):
        """Environment settings must be a mapping."""
        site_path = write_site(str(tmp_path), {'config/deploy.yml': "production: example.com\n"})

        with pytest.raises(ConfigError):
            ConfigLoader.load_deploy(site_path, 'production')


class TestLoadTranslations:
    """Test cases for ConfigLoader.load_translations."""

    def test_absent_file_means_no_translation(self, tmp_path):
        """Without translations.yml there is no translation."""
        assert ConfigLoader.load_translations(str(tmp_path)) == {}

    def test_invalid_entry_raises(self, tmp_path):
        """Each key must map locales to values."""
        site_path = write_site(str(tmp_path), {'config/translations.yml': "welcome: Hello\n"})

        with pytest.raises(ConfigError):
            ConfigLoader.load_translations(site_path)


class TestReadYaml:
    """Test cases for ConfigLoader.read_yaml."""

    def test_missing_file_raises_filesystem_error(self, tmp_path):
        """Reading a missing file raises FilesystemError."""
        with pytest.raises(FilesystemError) as exc_info:
            ConfigLoader.read_yaml(os.path.join(str(tmp_path), 'missing.yml'))

        assert exc_info.value.operation == 'read'


class TestSiteToDict:
    """Test cases for ConfigLoader.site_to_dict."""

    def test_round_trip(self, tmp_path):
        """A dumped site loads back to the same values."""
        site = Site(name='Sample', locales=['en', 'fr'], timezone='Paris')
        site.set('seo_title', 'Sample', 'en')
        site.set('seo_title', 'Exemple', 'fr')

        data = ConfigLoader.site_to_dict(site, [('about-us', {})])
        site_path = write_site(str(tmp_path), {'config/site.yml': ConfigLoader.dump_yaml(data)})
        loaded = ConfigLoader.load_site(site_path)

        assert loaded.site.locales == ['en', 'fr']
        assert loaded.site.timezone == 'Paris'
        assert loaded.site.translations_of('seo_title') == {'en': 'Sample', 'fr': 'Exemple'}
        assert loaded.pages == [('about-us', {})]
        assert yaml.safe_load(ConfigLoader.dump_yaml(data))['name'] == 'Sample'
