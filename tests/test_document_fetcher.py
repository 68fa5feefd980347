"""Tests for the document fetch pipeline."""

import json
import unittest
from unittest.mock import Mock

import requests

from dingtalk_doc_migrator.dingtalk_client import DingTalkClient
from dingtalk_doc_migrator.fetchers import (
    DentryKeyMissingError,
    DocumentFetcher,
    ExtractionError,
    FetchError,
    ReferenceResolutionError,
)

CONTENT = {'main': 'k1', 'parts': {'k1': {'data': {'body': [0, 0, ['p', {}, 'hi']]}}}}


def metadata_page(metadata):
    return f'<html><script id="mainsite_server_content">{json.dumps(metadata)}</script></html>'


def data_envelope(content):
    return {'data': {'documentContent': {'checkpoint': {'content': json.dumps(content)}}}}


class TestDocumentFetcher(unittest.TestCase):
    """Test the pipeline against a mocked transport."""

    def setUp(self):
        self.client = Mock(spec=DingTalkClient)
        self.client.base_url = 'https://alidocs.dingtalk.com'
        self.fetcher = DocumentFetcher({}, client=self.client)

    def test_full_pipeline(self):
        self.client.get.return_value = metadata_page(
            {'dentryInfo': {'data': {'dentryKey': 'dk-1', 'name': 'Weekly'}}}
        )
        self.client.post.return_value = data_envelope(CONTENT)

        bundle = self.fetcher.resolve_document('https://alidocs.dingtalk.com/i/nodes/n1?x=1', 'sid=1')

        self.assertEqual(bundle.node_id, 'n1')
        self.assertEqual(bundle.dentry_key, 'dk-1')
        self.assertEqual(bundle.title, 'Weekly')
        self.assertEqual(bundle.content, CONTENT)
        self.assertTrue(bundle.has_content)
        self.assertEqual(list(bundle.parts_index), ['k1'])

        page_url, page_headers = self.client.get.call_args[0]
        self.assertTrue(page_url.startswith('https://alidocs.dingtalk.com/i/nodes/n1?rnd='))
        self.assertEqual(page_headers['Cookie'], 'sid=1')

        post_url, body, post_headers = self.client.post.call_args[0]
        self.assertEqual(post_url, 'https://alidocs.dingtalk.com/api/document/data')
        self.assertEqual(body, {'fetchBody': True})
        self.assertEqual(post_headers['a-dentry-key'], 'dk-1')
        self.assertEqual(post_headers['Cookie'], 'sid=1')

    def test_configured_document_data_url(self):
        fetcher = DocumentFetcher(
            {'dingtalk': {'document_data_url': 'https://api.example.com/data'}},
            client=self.client
        )
        self.client.get.return_value = metadata_page({'data': {'nodeId': 'n2'}})
        self.client.post.return_value = data_envelope(CONTENT)

        bundle = fetcher.resolve_document('n2', 'sid=1')

        self.assertEqual(bundle.dentry_key, 'n2')
        self.assertEqual(bundle.title, 'DingTalk Document')
        self.assertEqual(self.client.post.call_args[0][0], 'https://api.example.com/data')

    def test_absent_content_is_not_an_error(self):
        self.client.get.return_value = metadata_page({'data': {'nodeId': 'n3'}})
        self.client.post.return_value = {'data': {'documentContent': {'checkpoint': {}}}}

        bundle = self.fetcher.resolve_document('n3', 'sid=1')

        self.assertIsNone(bundle.content)
        self.assertFalse(bundle.has_content)
        self.assertEqual(bundle.parts_index, {})

    def test_bad_reference(self):
        with self.assertRaises(ReferenceResolutionError):
            self.fetcher.resolve_document('https://alidocs.dingtalk.com/other/n1', 'sid=1')
        self.client.get.assert_not_called()

    def test_page_fetch_failure_reports_stage(self):
        self.client.get.side_effect = requests.exceptions.ConnectionError("down")

        with self.assertRaises(FetchError) as ctx:
            self.fetcher.resolve_document('n1', 'sid=1')

        self.assertEqual(ctx.exception.stage, 'fetch_page')
        self.client.post.assert_not_called()

    def test_missing_metadata_element(self):
        self.client.get.return_value = '<html><body>login required</body></html>'

        with self.assertRaises(ExtractionError):
            self.fetcher.resolve_document('n1', 'sid=1')

    def test_missing_dentry_key(self):
        self.client.get.return_value = metadata_page({'dentryInfo': {'data': {'name': 'x'}}})

        with self.assertRaises(DentryKeyMissingError):
            self.fetcher.resolve_document('n1', 'sid=1')

    def test_content_fetch_failure_reports_stage(self):
        self.client.get.return_value = metadata_page({'data': {'nodeId': 'n1'}})
        self.client.post.side_effect = requests.exceptions.HTTPError("500")

        with self.assertRaises(FetchError) as ctx:
            self.fetcher.resolve_document('n1', 'sid=1')

        self.assertEqual(ctx.exception.stage, 'fetch_content')


if __name__ == '__main__':
    unittest.main()
