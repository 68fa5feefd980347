"""Tests for output directories and Markdown files."""

import tempfile
import unittest
from pathlib import Path

from dingtalk_doc_migrator.exporters import ExportError, MarkdownExporter


class TestSanitizeFilename(unittest.TestCase):
    """Test title to filename conversion."""

    def test_unsafe_characters_replaced(self):
        self.assertEqual(MarkdownExporter.sanitize_filename('a/b\\c:d*e?f"g<h>i|j'), 'a_b_c_d_e_f_g_h_i_j')

    def test_adoc_suffix_stripped(self):
        self.assertEqual(MarkdownExporter.sanitize_filename('Guide.ADOC'), 'Guide')

    def test_whitespace_trimmed(self):
        self.assertEqual(MarkdownExporter.sanitize_filename('  周报  '), '周报')

    def test_long_titles_truncated(self):
        self.assertEqual(len(MarkdownExporter.sanitize_filename('x' * 500)), 200)

    def test_empty_titles(self):
        for title in (None, '', '   ', '.adoc'):
            self.assertEqual(MarkdownExporter.sanitize_filename(title), 'untitled')


class TestMarkdownExporter(unittest.TestCase):
    """Test filesystem writes."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.exporter = MarkdownExporter(self.root / 'out')

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_document_directory_is_not_created_until_written(self):
        directory = self.exporter.document_directory('Q1: Plan')

        self.assertEqual(directory, self.root / 'out' / 'Q1_ Plan')
        self.assertFalse(directory.exists())

        self.exporter.save_markdown_file('Q1: Plan', 'x')
        self.assertTrue(directory.is_dir())

    def test_save_markdown_file(self):
        path = self.exporter.save_markdown_file('Doc', '# Doc\n\n中文')

        self.assertEqual(path, self.root / 'out' / 'Doc' / 'Doc.md')
        self.assertEqual(path.read_text(encoding='utf-8'), '# Doc\n\n中文')

    def test_save_overwrites(self):
        self.exporter.save_markdown_file('Doc', 'first version, long')
        path = self.exporter.save_markdown_file('Doc', 'second')

        self.assertEqual(path.read_text(encoding='utf-8'), 'second')

    def test_write_bytes_creates_parents(self):
        path = MarkdownExporter.write_bytes(self.root / 'a' / 'b' / 'c.bin', b'\x00\x01')

        self.assertEqual(path.read_bytes(), b'\x00\x01')

    def test_write_failure_raises_export_error(self):
        blocker = self.root / 'blocker'
        blocker.write_text('x')

        with self.assertRaises(ExportError):
            MarkdownExporter.write_text(blocker / 'doc.md', 'text')

    def test_from_config(self):
        exporter = MarkdownExporter.from_config({'export': {'output_directory': str(self.root / 'cfg')}})
        self.assertEqual(exporter.output_directory, self.root / 'cfg')

        override = MarkdownExporter.from_config({}, output_dir=str(self.root / 'cli'))
        self.assertEqual(override.output_directory, self.root / 'cli')


if __name__ == '__main__':
    unittest.main()
