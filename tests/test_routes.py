#!/usr/bin/env python3
"""
ProofAlign API Test Suite
=========================
Validates the alignment endpoints, error responses and correlation ids.

Run with: python -m pytest tests/test_routes.py -v
"""

import json
import sys
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app import app
from config_logging import VERSION


class RouteTestCase(unittest.TestCase):
    """Shared test client setup."""

    def setUp(self):
        """Set up test client."""
        app.config['TESTING'] = True
        self.client = app.test_client()
        self.ctx = app.app_context()
        self.ctx.push()

    def tearDown(self):
        """Clean up."""
        self.ctx.pop()

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')


class TestAlignEndpoint(RouteTestCase):
    """POST /api/align"""

    def test_align_lists(self):
        """
        Test alignment of sentence lists.

        Expects: 200 with items in errata order and per-type statistics.
        """
        response = self.post_json('/api/align', {
            'source': ['X', 'Y'],
            'target': ['X', 'Z', 'Y'],
        })
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertTrue(data['success'])
        self.assertEqual([i['type'] for i in data['alignment']], ['match', 'insert', 'match'])
        self.assertEqual(data['statistics']['insert'], 1)
        self.assertEqual(data['source_count'], 2)
        self.assertEqual(data['target_count'], 3)
        self.assertEqual(data['options']['window_size'], 10)

    def test_align_text_with_camel_case_options(self):
        """Raw text is split per line; editor-style option names are accepted."""
        response = self.post_json('/api/align', {
            'source': 'ABCD\n\nEFGH',
            'target': 'ABCE\nEFGH',
            'options': {'ngramSize': 2, 'similarityThreshold': 0.5},
        })
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertEqual(data['statistics']['match'], 2)
        self.assertEqual(data['alignment'][1]['source_lines'], [3])

    def test_missing_source(self):
        response = self.post_json('/api/align', {'target': ['X']})
        self.assertEqual(response.status_code, 400)
        data = json.loads(response.data)
        self.assertFalse(data['success'])
        self.assertEqual(data['error']['code'], 'VALIDATION_ERROR')

    def test_bad_side_type(self):
        response = self.post_json('/api/align', {'source': [1, 2], 'target': ['X']})
        self.assertEqual(response.status_code, 400)

    def test_invalid_option(self):
        """
        Test option validation.

        Expects: 400 CONFIGURATION_ERROR naming the offending field.
        """
        response = self.post_json('/api/align', {
            'source': ['X'], 'target': ['X'], 'options': {'windowSize': 0},
        })
        self.assertEqual(response.status_code, 400)
        data = json.loads(response.data)
        self.assertEqual(data['error']['code'], 'CONFIGURATION_ERROR')
        self.assertEqual(data['error']['field'], 'window_size')

    def test_options_not_an_object(self):
        """
        Test options given as a list, string or number.

        Expects: 400 CONFIGURATION_ERROR for the options field.
        """
        for bad in (['windowSize', 3], 'fast', 5):
            response = self.post_json('/api/align', {
                'source': ['a'], 'target': ['a'], 'options': bad,
            })
            self.assertEqual(response.status_code, 400)
            data = json.loads(response.data)
            self.assertEqual(data['error']['code'], 'CONFIGURATION_ERROR')
            self.assertEqual(data['error']['field'], 'options')

    def test_non_json_body(self):
        response = self.client.post('/api/align', data='not json', content_type='text/plain')
        self.assertEqual(response.status_code, 400)
        data = json.loads(response.data)
        self.assertEqual(data['error']['code'], 'VALIDATION_ERROR')


class TestExportEndpoint(RouteTestCase):
    """POST /api/align/export/<fmt>"""

    payload = {
        'source': ['他去了北京。', '天气很好。'],
        'target': ['他去了上海。', '天气很好。'],
        'options': {'similarityThreshold': 0.5},
    }

    def test_csv_export(self):
        response = self.post_json('/api/align/export/csv', self.payload)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.mimetype.startswith('text/csv'))
        self.assertIn('alignment_errata.csv', response.headers['Content-Disposition'])
        self.assertTrue(response.data.startswith(b'\xef\xbb\xbf'))
        self.assertIn('上海'.encode('utf-8'), response.data)

    def test_docx_export(self):
        response = self.post_json('/api/align/export/docx', self.payload)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[:2], b'PK')

    def test_html_export(self):
        response = self.post_json('/api/align/export/HTML', self.payload)
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'pa-added', response.data)

    def test_unknown_format(self):
        response = self.post_json('/api/align/export/pdf', self.payload)
        self.assertEqual(response.status_code, 400)
        data = json.loads(response.data)
        self.assertEqual(data['error']['code'], 'VALIDATION_ERROR')


class TestServiceEndpoints(RouteTestCase):
    """Defaults, health, version and correlation ids."""

    def test_defaults(self):
        response = self.client.get('/api/align/defaults')
        data = json.loads(response.data)
        self.assertTrue(data['success'])
        self.assertEqual(data['options']['similarity_threshold'], 0.6)
        self.assertNotIn('tokenizer', data['options'])

    def test_health(self):
        response = self.client.get('/api/align/health')
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertEqual(data['status'], 'healthy')
        self.assertIn('docx', data['export_formats'])

    def test_version(self):
        data = json.loads(self.client.get('/api/version').data)
        self.assertEqual(data['version'], VERSION)

    def test_correlation_id_echoed(self):
        response = self.client.get('/api/align/health', headers={'X-Correlation-ID': 'req-42'})
        self.assertEqual(response.headers['X-Correlation-ID'], 'req-42')

    def test_correlation_id_generated(self):
        response = self.client.get('/api/align/health')
        self.assertTrue(response.headers['X-Correlation-ID'])


if __name__ == '__main__':
    unittest.main()
