"""YAML configuration loading and validation.

A site directory holds its configuration under `config/`:

    config/site.yml          site metadata, locales (required), page settings
    config/deploy.yml        connection settings, one mapping per environment
    config/translations.yml  translation key -> {locale: value}

Example site.yml:
    name: Sample website
    locales: [en, fr]
    seo_title:
      en: Sample
      fr: Exemple
    pages:
      - index:
          listed: false
      - about-us:
          cache_strategy: none
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

from src.models.site import Site
from src.models.translation import Translation
from .errors import ConfigError, FilesystemError
from .path_resolver import dasherize_path


@dataclass
class SiteConfig:
    """Parsed content of config/site.yml.

    Attributes:
        site: Site metadata
        pages: Ordered (fullpath, attributes) pairs from the `pages` list
    """
    site: Site
    pages: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)


class ConfigLoader:
    """Loads and saves the YAML configuration files of a site."""

    SITE_FILE = os.path.join('config', 'site.yml')
    DEPLOY_FILE = os.path.join('config', 'deploy.yml')
    TRANSLATIONS_FILE = os.path.join('config', 'translations.yml')

    # Site attributes copied as-is from site.yml
    SITE_ATTRIBUTES = ('subdomain', 'timezone')

    DEPLOY_FIELDS = ('host', 'email', 'password', 'api_key')

    @classmethod
    def read_yaml(cls, file_path: str) -> Any:
        """Read and parse a YAML file.

        Raises:
            FilesystemError: If the file cannot be read
            ConfigError: If the file is not valid YAML
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(file_path, 'read', 'File not found')
        except PermissionError:
            raise FilesystemError(file_path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(file_path, 'read', str(e))

        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax in {file_path}: {str(e)}")

    @staticmethod
    def dump_yaml(data: Any) -> str:
        return yaml.safe_dump(
            data,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

    @classmethod
    def load_site(cls, site_path: str) -> SiteConfig:
        """Load config/site.yml.

        Raises:
            ConfigError: If the site path or the file is missing, or if
                `locales` is missing or empty
        """
        if not os.path.isdir(site_path):
            raise ConfigError(f"Site path {site_path} does not exist")

        config_path = os.path.join(site_path, cls.SITE_FILE)
        if not os.path.isfile(config_path):
            raise ConfigError(f"Site configuration file {config_path} not found")

        config_dict = cls.read_yaml(config_path)

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Site configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        locales = config_dict.get('locales')
        if isinstance(locales, str):
            locales = [locales]
        if not isinstance(locales, list) or not locales:
            raise ConfigError("At least one locale is required", 'locales')

        domains = config_dict.get('domains') or []
        if not isinstance(domains, list):
            raise ConfigError("Field 'domains' must be a list", 'domains')

        site = Site(
            name=str(config_dict.get('name') or os.path.basename(os.path.abspath(site_path))),
            locales=[str(locale) for locale in locales],
            domains=[str(domain) for domain in domains],
        )
        for name in cls.SITE_ATTRIBUTES:
            if config_dict.get(name) is not None:
                setattr(site, name, str(config_dict[name]))

        for name in Site.LOCALIZED_FIELDS:
            cls._assign_localized(site, name, config_dict.get(name), site.default_locale)

        return SiteConfig(site=site, pages=cls._parse_pages(config_dict.get('pages')))

    @staticmethod
    def _assign_localized(resource: Any, name: str, value: Any, default_locale: str) -> None:
        """Set a value given either as a plain value or as a {locale: value} mapping."""
        if value is None:
            return
        if isinstance(value, dict):
            for locale, localized_value in value.items():
                resource.set(name, localized_value, str(locale))
        else:
            resource.set(name, value, default_locale)

    @classmethod
    def _parse_pages(cls, pages_raw: Any) -> List[Tuple[str, Dict[str, Any]]]:
        if pages_raw is None:
            return []
        if not isinstance(pages_raw, list):
            raise ConfigError("Field 'pages' must be a list", 'pages')

        pages = []
        for i, entry in enumerate(pages_raw):
            if isinstance(entry, str):
                fullpath, attributes = entry, {}
            elif isinstance(entry, dict) and len(entry) == 1:
                fullpath, attributes = next(iter(entry.items()))
                attributes = attributes or {}
            else:
                raise ConfigError(
                    f"Page entry at index {i} must be a fullpath or a single-key mapping",
                    f'pages[{i}]'
                )
            if not isinstance(attributes, dict):
                raise ConfigError(
                    f"Attributes of page '{fullpath}' must be a dictionary",
                    f'pages[{i}]'
                )
            pages.append((dasherize_path(str(fullpath)), dict(attributes)))
        return pages

    @classmethod
    def load_deploy(cls, site_path: str, env: str) -> Optional[Dict[str, Any]]:
        """Return the connection settings of `env`, None if none are configured.

        Raises:
            ConfigError: If deploy.yml is malformed
        """
        deploy_path = os.path.join(site_path, cls.DEPLOY_FILE)
        if not os.path.isfile(deploy_path):
            return None

        config_dict = cls.read_yaml(deploy_path) or {}
        if not isinstance(config_dict, dict):
            raise ConfigError("deploy.yml must be a YAML dictionary")

        settings = config_dict.get(env)
        if settings is None:
            return None
        if not isinstance(settings, dict):
            raise ConfigError(f"Settings of environment '{env}' must be a dictionary", env)

        return {key: settings[key] for key in cls.DEPLOY_FIELDS if settings.get(key) is not None}

    @classmethod
    def load_translations(cls, site_path: str) -> Dict[str, Translation]:
        """Load config/translations.yml (an absent file means no translation).

        Raises:
            ConfigError: If an entry is not a key -> {locale: value} mapping
        """
        translations_path = os.path.join(site_path, cls.TRANSLATIONS_FILE)
        if not os.path.isfile(translations_path):
            return {}

        config_dict = cls.read_yaml(translations_path) or {}
        if not isinstance(config_dict, dict):
            raise ConfigError("translations.yml must be a YAML dictionary")

        translations = {}
        for key, values in config_dict.items():
            if not isinstance(values, dict):
                raise ConfigError(f"Translation '{key}' must map locales to values", str(key))
            translations[str(key)] = Translation(
                key=str(key),
                values={str(locale): str(value) for locale, value in values.items() if value is not None}
            )
        return translations

    @classmethod
    def site_to_dict(cls, site: Site, pages: Optional[List[Tuple[str, Dict[str, Any]]]] = None) -> Dict[str, Any]:
        """Inverse of load_site, used when writing a pulled site."""
        config_dict: Dict[str, Any] = {
            'name': site.name,
            'locales': list(site.locales),
        }
        if site.subdomain:
            config_dict['subdomain'] = site.subdomain
        if site.domains:
            config_dict['domains'] = list(site.domains)
        if site.timezone:
            config_dict['timezone'] = site.timezone
        for name in Site.LOCALIZED_FIELDS:
            values = {
                locale: value for locale, value in site.translations_of(name).items()
                if value not in (None, '')
            }
            if values:
                config_dict[name] = values
        if pages:
            config_dict['pages'] = [{fullpath: attributes} for fullpath, attributes in pages]
        return config_dict
