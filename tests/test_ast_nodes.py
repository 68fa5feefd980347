"""Tests for decoding the tagged-array document tree."""

import unittest

from dingtalk_doc_migrator.converters.ast_nodes import AstNode, decode_node, heading_level, is_heading_tag


class TestDecodeNode(unittest.TestCase):
    """Test structural decoding."""

    def test_decodes_nested_nodes_and_text(self):
        node = decode_node(['p', {'a': 1}, 'text', ['span', {}, 'inner']])

        self.assertEqual(node, AstNode('p', {'a': 1}, ['text', AstNode('span', {}, ['inner'])]))

    def test_invalid_shapes(self):
        for raw in (None, 'p', ['p'], [], [1, {}], ['p', 'attrs'], {'tag': 'p'}):
            self.assertIsNone(decode_node(raw))

    def test_null_attrs_become_empty(self):
        self.assertEqual(decode_node(['p', None]).attrs, {})

    def test_malformed_children_dropped(self):
        node = decode_node(['p', {}, 'a', 5, None, ['bad'], {'x': 1}, 'b'])

        self.assertEqual(node.children, ['a', 'b'])

    def test_depth_limit(self):
        raw = ['span', {}, 'leaf']
        for _ in range(10):
            raw = ['span', {}, raw]

        node = decode_node(raw, max_depth=3)

        depth = 0
        while node.child_nodes():
            node = node.child_nodes()[0]
            depth += 1
        self.assertEqual(depth, 2)

    def test_attr_defaults(self):
        node = AstNode('img', {'src': None, 'name': 'n'})

        self.assertEqual(node.attr('src', ''), '')
        self.assertEqual(node.attr('name', 'image'), 'n')
        self.assertEqual(node.attr('missing', 'd'), 'd')

    def test_child_nodes_filter(self):
        node = decode_node(['tr', {}, ['tc', {}], 'text', ['p', {}], ['tc', {}]])

        self.assertEqual(len(node.child_nodes('tc')), 2)
        self.assertEqual(len(node.child_nodes()), 3)


class TestHeadings(unittest.TestCase):
    """Test heading tag parsing."""

    def test_heading_level(self):
        self.assertEqual(heading_level('h1'), 1)
        self.assertEqual(heading_level('h6'), 6)
        self.assertEqual(heading_level('h9'), 6)
        self.assertEqual(heading_level('h0'), 1)
        self.assertEqual(heading_level('hx'), 1)

    def test_is_heading_tag(self):
        self.assertTrue(is_heading_tag('h3'))
        self.assertTrue(is_heading_tag('h12'))
        self.assertFalse(is_heading_tag('hr'))
        self.assertFalse(is_heading_tag('h'))
        self.assertFalse(is_heading_tag('p'))


if __name__ == '__main__':
    unittest.main()
