"""Unit tests for the Page model."""

import gc

from src.models.page import DEFAULT_POSITION, Page


def make_page(fullpath, locales=('en',), **kwargs):
    page = Page(fullpath=fullpath, **kwargs)
    for locale in locales:
        page.set_template(f"{fullpath} in {locale}", locale)
    return page


class TestPageStructure:
    """Test cases for tree attributes."""

    def test_depth_from_fullpath(self):
        """Depth defaults to the number of path segments, 0 for the roots."""
        assert Page(fullpath='index').depth == 0
        assert Page(fullpath='404').depth == 0
        assert Page(fullpath='about-us').depth == 1
        assert Page(fullpath='about-us/team').depth == 2

    def test_default_position(self):
        """Pages start at the default sibling position."""
        assert Page(fullpath='contact').position == DEFAULT_POSITION

    def test_add_child_sets_parent_and_depth(self):
        """add_child links both ways and updates the depth."""
        index = Page(fullpath='index')
        child = Page(fullpath='about-us')

        index.add_child(child)

        assert child.parent is index
        assert child.depth == 1
        assert index.children == [child]

    def test_children_sorted_by_position(self):
        """Children stay ordered by (depth, position)."""
        index = Page(fullpath='index')
        second = Page(fullpath='b', position=2)
        first = Page(fullpath='a', position=1)

        index.add_child(second)
        index.add_child(first)

        assert index.children == [first, second]

    def test_parent_is_weak_reference(self):
        """A child does not keep its parent alive."""
        parent = Page(fullpath='about-us')
        child = Page(fullpath='about-us/team')
        parent.add_child(child)

        del parent
        gc.collect()

        assert child.parent is None

    def test_walk_is_pre_order(self):
        """walk yields the page, then each subtree in order."""
        index = Page(fullpath='index')
        about = index.add_child(Page(fullpath='about-us', position=1))
        team = about.add_child(Page(fullpath='about-us/team'))
        contact = index.add_child(Page(fullpath='contact', position=2))

        assert list(index.walk()) == [index, about, team, contact]


class TestPageTranslations:
    """Test cases for translated locales."""

    def test_set_template_marks_translated(self):
        """Storing a template flags the locale as translated."""
        page = Page(fullpath='about-us')

        page.set_template('<p>Hi</p>', 'fr')

        assert page.translated_in == ['fr']
        assert page.is_translated_in('fr')
        assert not page.is_translated_in('en')

    def test_safely_translated_needs_parent_translation(self):
        """A page is safely translated only if its parent is translated too."""
        parent = make_page('about-us', locales=('en',))
        child = make_page('about-us/team', locales=('en', 'fr'))
        parent.add_child(child)

        assert child.is_safely_translated('en')
        assert not child.is_safely_translated('fr')

    def test_root_is_safely_translated_when_translated(self):
        """A page without parent only needs its own translation."""
        index = make_page('index', locales=('fr',))

        assert index.is_safely_translated('fr')
        assert not index.is_safely_translated('en')


class TestLocalizeFullpath:
    """Test cases for localized fullpaths."""

    def test_child_of_index_uses_slug(self):
        """Children of index use their own slug in each locale."""
        index = Page(fullpath='index')
        about = index.add_child(Page(fullpath='about-us'))
        about.set('slug', 'a-propos', 'fr')

        about.localize_fullpath(['en', 'fr'])

        assert about.localized_fullpath('en') == 'about-us'
        assert about.localized_fullpath('fr') == 'a-propos'

    def test_deeper_page_appends_to_parent(self):
        """Deeper pages append their slug to the localized parent fullpath."""
        index = Page(fullpath='index')
        about = index.add_child(Page(fullpath='about-us'))
        about.set('slug', 'a-propos', 'fr')
        team = about.add_child(Page(fullpath='about-us/team'))
        team.set('slug', 'equipe', 'fr')

        about.localize_fullpath(['en', 'fr'])
        team.localize_fullpath(['en', 'fr'])

        assert team.localized_fullpath('en') == 'about-us/team'
        assert team.localized_fullpath('fr') == 'a-propos/equipe'

    def test_roots_keep_their_identifier(self):
        """index and 404 keep their fullpath in every locale."""
        not_found = Page(fullpath='404')

        not_found.localize_fullpath(['en', 'fr'])

        assert not_found.localized_fullpath('fr') == '404'
        assert not_found.get('slug', 'fr') == '404'


class TestDefaultTemplate:
    """Test cases for set_default_template_for_each_locale."""

    def test_roots_receive_default_template_everywhere(self):
        """index gets the default template in every untranslated locale."""
        index = make_page('index', locales=('en',))

        index.set_default_template_for_each_locale('en', ['en', 'fr', 'de'])

        assert index.get('raw_template', 'fr') == 'index in en'
        assert index.translated_in == ['en', 'fr', 'de']

    def test_page_without_content_in_locale_is_left_alone(self):
        """A regular page without any content in a locale stays untranslated."""
        page = make_page('contact', locales=('en',))

        page.set_default_template_for_each_locale('en', ['en', 'fr'])

        assert not page.is_translated_in('fr')

    def test_page_with_localized_content_receives_template(self):
        """A page with a localized title in a locale gets the default template."""
        page = make_page('contact', locales=('en',))
        page.set('title', 'Contactez-nous', 'fr')

        page.set_default_template_for_each_locale('en', ['en', 'fr'])

        assert page.is_translated_in('fr')
        assert page.get('raw_template', 'fr') == 'contact in en'

    def test_existing_translation_is_kept(self):
        """A locale with its own template is not overwritten."""
        index = make_page('index', locales=('en', 'fr'))

        index.set_default_template_for_each_locale('en', ['en', 'fr'])

        assert index.get('raw_template', 'fr') == 'index in fr'


class TestPageAttributes:
    """Test cases for the flattened attributes."""

    def test_attributes_skip_missing_values(self):
        """attributes() drops None values and includes the localized fullpath."""
        page = Page(fullpath='contact', handle='contact-us')
        page.set('title', 'Contact', 'en')

        attributes = page.attributes('en')

        assert attributes['title'] == 'Contact'
        assert attributes['fullpath'] == 'contact'
        assert attributes['handle'] == 'contact-us'
        assert 'seo_title' not in attributes
        assert 'redirect_url' not in attributes
