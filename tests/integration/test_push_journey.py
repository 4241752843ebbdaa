"""Push journeys from a site directory to the in-memory engine."""

import os

from src.site_mapper.site_reader import SiteReader
from src.site_mapper.site_writer import SiteWriter
from src.sync.ledger import Status
from src.sync.push_engine import PushEngine, PushOptions
from tests.fixtures.sample_sites import SIMPLE_SITE, write_site
from tests.helpers.fake_engine import FakeEngine


def push(site_path, engine, options=None):
    return PushEngine(engine, SiteReader(site_path).read(), options).run()


class TestPushJourney:
    """End-to-end push scenarios."""

    def test_written_copy_pushes_like_the_original(self, simple_site, tmp_path):
        """A site rewritten by the writer produces the same remote pages."""
        copy_path = str(tmp_path / 'copy')
        SiteWriter(SiteReader(simple_site).read(), copy_path).write()

        original_engine = FakeEngine()
        copy_engine = FakeEngine()
        push(simple_site, original_engine)
        push(copy_path, copy_engine)

        def remote_pages(engine):
            return sorted((record['fullpath'], tuple(record['translated_in'])) for record in engine.pages.values())

        assert remote_pages(copy_engine) == remote_pages(original_engine)

    def test_assets_are_uploaded_once_and_rewritten(self, tmp_path):
        """Templates referencing a local asset are pushed with its remote URL."""
        files = dict(SIMPLE_SITE)
        files['app/views/pages/contact.liquid'] = '---\ntitle: Contact\n---\n<img src="/samples/map.png">\n'
        files['app/views/snippets/header.liquid'] = '<img src="/samples/map.png">\n'
        site_path = write_site(str(tmp_path / 'site'), files)
        os.makedirs(os.path.join(site_path, 'public', 'samples'))
        with open(os.path.join(site_path, 'public', 'samples', 'map.png'), 'wb') as f:
            f.write(b'PNG')
        engine = FakeEngine()

        report = push(site_path, engine)

        assert len(engine.calls_to('upload_content_asset')) == 1
        url = next(iter(engine.content_assets.values()))['url']
        contact = next(call for call in engine.calls_to('create_page') if call[1] == 'contact')
        assert url in contact[3]['raw_template']
        assert not report.has_errors

    def test_forced_push_updates_site_in_every_locale(self, simple_site):
        """A forced second push updates the site and resends full payloads."""
        engine = FakeEngine()
        push(simple_site, engine)
        engine.calls.clear()

        report = push(simple_site, engine, PushOptions(force=True))

        assert [call[2] for call in engine.calls_to('update_site')] == ['en', 'fr']
        site_statuses = report.for_resource('site', 'Sample website')
        assert all(status.status is Status.SUCCESS for status in site_statuses)
