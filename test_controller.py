"""
End-to-end tests for the archiving run with the HTTP layer stubbed out.
"""

import zipfile

import pytest

from mpvault.core.config import ClientConfig, RunConfig
from mpvault.core.controller import ArchiveController
from mpvault.core.exceptions import DownloadFailedError, SessionExpiredError
from mpvault.utils.file_manager import FileManager


ARTICLE = '<html><body><div id="page-content"><h1>{title}</h1></div></body></html>'


def fake_download(url, title=None):
    if url.endswith('/gone'):
        raise DownloadFailedError(url=url)
    if url.endswith('/empty'):
        return '<html><body><p>no container</p></body></html>'
    return ARTICLE.format(title=title or url)


@pytest.fixture
def controller(tmp_path, mocker):
    config = RunConfig(output_path=str(tmp_path / 'articles.zip'), fakeid='FAKEID', token='TOKEN',
                       client=ClientConfig(base_url='http://backend.test'))
    ctl = ArchiveController(config)
    mocker.patch.object(ctl.downloader, 'download_article_html', side_effect=fake_download)
    yield ctl
    ctl.close()


def test_archive_articles_counts_failures(controller):
    articles = [
        {'title': 'First', 'link': 'https://mp.example.com/s/1', 'create_time': 1684152000},
        {'title': 'Gone', 'link': 'https://mp.example.com/s/gone'},
        {'title': 'Empty', 'link': 'https://mp.example.com/s/empty'},
        {'title': 'First', 'link': 'https://mp.example.com/s/2', 'create_time': 1684152000},
        {'title': 'No link'},
    ]
    events = []

    stats = controller.archive_articles(articles, events.append)

    assert stats == {'total': 5, 'downloaded': 3, 'packed': 2, 'failed': 3}
    folder = FileManager().archive_folder_name(articles[0])
    names = controller.archive.namelist()
    assert f'{folder}/index.html' in names
    assert f'{folder} (2)/index.html' in names
    assert len(controller.error_tracker.errors) == 2
    assert events[-1] == {'type': 'counters', 'stats': stats}


def test_repeated_runs_do_not_overwrite_folders(controller):
    controller.archive_articles([{'title': 'Same', 'link': 'https://mp.example.com/s/1'}])
    controller.archive_articles([{'title': 'Same', 'link': 'https://mp.example.com/s/2'}])

    assert sorted(controller.archive.namelist()) == ['Same (2)/index.html', 'Same/index.html']


def test_suffixed_title_does_not_collide(controller):
    articles = [{'title': t, 'link': f'https://mp.example.com/s/{i}'}
                for i, t in enumerate(['A (2)', 'A', 'A'])]

    stats = controller.archive_articles(articles)

    assert stats['packed'] == 3
    assert sorted(controller.archive.namelist()) == ['A (2)/index.html', 'A (3)/index.html', 'A/index.html']


def test_save_writes_zip(controller, tmp_path):
    controller.archive_articles([{'title': 'Only', 'link': 'https://mp.example.com/s/1'}])
    path = controller.save()

    assert path == str(tmp_path / 'articles.zip')
    with zipfile.ZipFile(path) as z:
        assert 'Only/index.html' in z.namelist()
        assert b'<h1>Only</h1>' in z.read('Only/index.html')


def test_archive_account_honours_max_articles(controller, mocker):
    controller.config.max_articles = 2
    listed = [{'title': str(i), 'link': f'https://mp.example.com/s/{i}'} for i in range(5)]
    mocker.patch.object(controller.lister, 'iter_articles', return_value=iter(listed))

    stats = controller.archive_account()

    assert stats['packed'] == 2
    assert sorted(controller.archive.namelist()) == ['0/index.html', '1/index.html']


def test_session_expiry_propagates(controller, mocker):
    mocker.patch.object(controller.lister, 'iter_articles', side_effect=SessionExpiredError())
    with pytest.raises(SessionExpiredError):
        controller.archive_account()


def test_account_requires_credentials(controller):
    controller.config.token = None
    with pytest.raises(ValueError):
        controller.list_account_articles()


def test_stop_halts_between_articles(controller):
    controller.stop()
    stats = controller.archive_articles([{'link': 'https://mp.example.com/s/1'}])
    assert stats['total'] == 0
