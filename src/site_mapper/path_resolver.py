"""Pure functions mapping template paths to page identifiers.

A page identifier (fullpath) is the slash-separated, dasherized path of
its template below app/views/pages, without any extension:
`app/views/pages/About_Us/team.fr.liquid` -> `about-us/team`.
"""

import os
import posixpath
import re
from typing import Iterable, Optional

INDEX = 'index'
NOT_FOUND = '404'

_NON_ALPHANUMERIC = re.compile(r'[^a-z0-9]+')


def dasherize(value: str) -> str:
    """Lowercase `value` and turn each run of non-alphanumerics into one hyphen.

    Examples:
        >>> dasherize('About_Us')
        'about-us'
        >>> dasherize('  Our  team! ')
        'our-team'
    """
    return _NON_ALPHANUMERIC.sub('-', str(value).lower()).strip('-')


def dasherize_path(path: str) -> str:
    """Dasherize every segment of a slash-separated path."""
    return '/'.join(dasherize(segment) for segment in str(path).split('/') if segment)


def permalink(value: str) -> str:
    """Like dasherize, with underscores (snippet and entry slugs).

    Example:
        >>> permalink('Main Menu')
        'main_menu'
    """
    return _NON_ALPHANUMERIC.sub('_', str(value).lower()).strip('_')


def humanize(value: str) -> str:
    """Turn an identifier into a label: `about-us` -> `About us`."""
    text = re.sub(r'[-_]+', ' ', str(value)).strip()
    return text[:1].upper() + text[1:]


def filepath_locale(path: str, known_locales: Iterable[str], default_locale: Optional[str]) -> Optional[str]:
    """Return the locale of a template from its file name.

    The locale token is the second dot-separated segment of the base name
    (`team.fr.liquid` -> `fr`).

    - no token: the default locale
    - a registered locale: that locale
    - an unregistered two-letter token: None (the caller skips the file)
    - any other token (`index.sometag.liquid`): the default locale

    Examples:
        >>> filepath_locale('index.fr.liquid', ['en', 'fr'], 'en')
        'fr'
        >>> filepath_locale('index.de.liquid', ['en', 'fr'], 'en') is None
        True
    """
    segments = os.path.basename(path).split('.')
    token = segments[1] if len(segments) > 1 else None

    if token is None:
        return default_locale
    if token in [str(locale) for locale in known_locales]:
        return token
    if len(token) == 2:
        return None
    return default_locale


def is_subpage_of(fullpath: str, parent_fullpath: str) -> bool:
    """Tell if `fullpath` is a direct child of `parent_fullpath`.

    The two roots are never subpages. A single-segment path is a child of
    index. Otherwise the directory of the path must match the parent, both
    sides dasherized.

    Examples:
        >>> is_subpage_of('about-us/team', 'about-us')
        True
        >>> is_subpage_of('team', 'index')
        True
        >>> is_subpage_of('index', 'about-us')
        False
    """
    if fullpath in (INDEX, NOT_FOUND):
        return False

    if parent_fullpath == INDEX and '/' not in fullpath:
        return True

    return posixpath.dirname(dasherize_path(fullpath)) == dasherize_path(parent_fullpath)


def filepath_to_fullpath(filepath: str, root_dir: str) -> str:
    """Map a template path to its page fullpath.

    Example:
        >>> filepath_to_fullpath('/site/app/views/pages/about_us/team.fr.liquid', '/site/app/views/pages')
        'about-us/team'
    """
    relative = str(filepath).replace(os.sep, '/')
    prefix = str(root_dir).replace(os.sep, '/').rstrip('/') + '/'
    if relative.startswith(prefix):
        relative = relative[len(prefix):]
    if relative.startswith('./'):
        relative = relative[2:]

    directory, basename = posixpath.split(relative)
    stem = basename.split('.')[0]
    return dasherize_path(posixpath.join(directory, stem) if directory else stem)


def localized_filename(fullpath: str, locale: str, default_locale: str, extension: str = 'liquid') -> str:
    """Relative template path of a page in a locale.

    Example:
        >>> localized_filename('about-us/team', 'fr', 'en')
        'about-us/team.fr.liquid'
    """
    if str(locale) == str(default_locale):
        return f"{fullpath}.{extension}"
    return f"{fullpath}.{locale}.{extension}"
