"""
Tests for the in-memory archive and asset naming.
"""

import io
import re
import zipfile

from mpvault.core.archive import Archive, unique_asset_name


def test_unique_asset_name():
    name = unique_asset_name('png')
    assert re.fullmatch(r'[0-9a-f]{32}\.png', name)
    assert unique_asset_name('.css').endswith('.css')
    assert unique_asset_name('').endswith('.bin')
    assert unique_asset_name('png/../../evil').endswith('.bin')
    assert '/' not in unique_asset_name('../x')
    assert len({unique_asset_name('png') for _ in range(1000)}) == 1000


def test_rewriting_a_path_replaces_it():
    archive = Archive()
    archive.file('index.html', '<p>one</p>')
    archive.file('index.html', '<p>two</p>')

    names = zipfile.ZipFile(io.BytesIO(archive.to_bytes())).namelist()
    assert names.count('index.html') == 1
    assert archive.read('index.html') == b'<p>two</p>'


def test_folder_views_share_storage(tmp_path):
    archive = Archive()
    article = archive.folder('2023-05-15 Title')
    assets = article.folder('assets')
    assets.file('a.png', b'\x89PNG')
    article.file('index.html', 'x')

    assert archive.namelist() == ['2023-05-15 Title/assets/a.png', '2023-05-15 Title/index.html']
    assert article.namelist() == ['assets/a.png', 'index.html']
    assert assets.read('a.png') == b'\x89PNG'
    assert '2023-05-15 Title/assets/a.png' in archive.namelist()
    assert len(assets) == 1

    path = archive.save(str(tmp_path / 'out' / 'articles.zip'))
    with zipfile.ZipFile(path) as z:
        assert z.read('2023-05-15 Title/assets/a.png') == b'\x89PNG'
        assert '2023-05-15 Title/' in z.namelist()
