"""Tests for downloading images and naming them."""

from unittest.mock import Mock

import pytest
import requests

from dingtalk_doc_migrator.dingtalk_client import DingTalkClient
from dingtalk_doc_migrator.exporters import ImageDownloadError, ImageMaterializer, image_extension, image_filename


@pytest.fixture
def client():
    client = Mock(spec=DingTalkClient)
    client.base_url = 'https://alidocs.dingtalk.com'
    client.absolute_url.side_effect = lambda url: url if url.startswith('http') else client.base_url + url
    return client


class TestNaming:
    """Test extension and filename helpers."""

    @pytest.mark.parametrize('src,extension', [
        ('https://x/a.jpg?x=1', '.jpg'),
        ('https://x/a.JPEG', '.jpeg'),
        ('https://x/a.webp', '.webp'),
        ('https://x/a.svg?w=1&h=2', '.svg'),
        ('https://x/a.tiff', '.png'),
        ('https://x/a', '.png'),
        ('https://x/a.png.exe', '.png'),
    ])
    def test_image_extension(self, src, extension):
        assert image_extension(src) == extension

    def test_image_filename(self):
        assert image_filename(1, '.jpg') == 'image_001.jpg'
        assert image_filename(42, '.png') == 'image_042.png'
        assert image_filename(1234, '.gif') == 'image_1234.gif'


class TestImageMaterializer:
    """Test the download and write behavior."""

    def test_downloads_and_writes(self, client, tmp_path):
        client.download.return_value = b'\x89PNG data'
        destination = tmp_path / 'doc' / 'images' / 'image_001.png'

        result = ImageMaterializer(client).materialize('/core/img.png', 'sid=1', destination)

        assert result == destination
        assert destination.read_bytes() == b'\x89PNG data'

        url, headers = client.download.call_args[0]
        assert url == 'https://alidocs.dingtalk.com/core/img.png'
        assert headers['Cookie'] == 'sid=1'
        assert headers['Referer'] == 'https://alidocs.dingtalk.com/'
        assert headers['Accept'].startswith('image/avif')

    def test_overwrites_existing_file(self, client, tmp_path):
        destination = tmp_path / 'image_001.png'
        destination.write_bytes(b'old content that is longer')
        client.download.return_value = b'new'

        ImageMaterializer(client).materialize('https://x/a.png', None, destination)

        assert destination.read_bytes() == b'new'

    def test_empty_body_fails(self, client, tmp_path):
        client.download.return_value = b''
        destination = tmp_path / 'image_001.png'

        with pytest.raises(ImageDownloadError):
            ImageMaterializer(client).materialize('https://x/a.png', 'sid=1', destination)
        assert not destination.exists()

    def test_transport_error_fails(self, client, tmp_path):
        client.download.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(ImageDownloadError):
            ImageMaterializer(client).materialize('https://x/a.png', 'sid=1', tmp_path / 'a.png')

    def test_write_failure_fails(self, client, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('file, not a directory')
        client.download.return_value = b'data'

        with pytest.raises(ImageDownloadError):
            ImageMaterializer(client).materialize('https://x/a.png', None, blocker / 'image_001.png')

    def test_custom_base_url_for_referer(self, client):
        materializer = ImageMaterializer(client, base_url='https://docs.example.com/')

        assert materializer.request_headers(None) == {
            'Accept': 'image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8',
            'Referer': 'https://docs.example.com/'
        }
