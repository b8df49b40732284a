# encoding: utf-8
import pytest
from lxml import etree

from ncip.util.xmlparser import XMLParser


class MockParser(XMLParser):
    """A mock XMLParser that just returns every tag it hears about."""

    def process_one(self, tag, namespaces):
        return tag


class TestXMLParser(object):

    def test_process_all(self):
        # Verify that process_all can handle either XML markup
        # or an already-parsed tag object.
        data = '<atag>This is a tag.</atag>'

        # Try it with markup.
        parser = MockParser()
        [tag] = parser.process_all(data, "/*")
        assert "atag" == tag.tag
        assert "This is a tag." == tag.text

        # Try it with a tag.
        [tag2] = parser.process_all(tag, "/*")
        assert tag == tag2

    def test_process_all_with_xpath(self):
        # Verify that process_all processes only tags that
        # match the given XPath expression.
        data = '<parent><a>First</a><b>Second</b><a>Third</a></parent>'

        parser = MockParser()

        # Only process the <a> tags beneath the <parent> tag.
        [tag1, tag3] = parser.process_all(data, "/parent/a")
        assert "First" == tag1.text
        assert "Third" == tag3.text

    def test_process_all_with_file_object(self):
        from io import BytesIO
        parser = MockParser()
        [tag] = parser.process_all(BytesIO(b"<atag>Hi</atag>"), "/atag")
        assert "Hi" == tag.text

    def test_invalid_characters_are_stripped(self):
        data = b'<?xml version="1.0" encoding="utf-8"?><tag>I enjoy invalid characters, such as \x00 and smart quotes: \xe2\x80\x9c\xe2\x80\x9d.</tag>'
        parser = MockParser()
        [tag] = parser.process_all(data, "/tag")
        assert 'I enjoy invalid characters, such as  and smart quotes: “”.' == tag.text

    def test_strict_parser_does_not_recover(self):
        parser = MockParser()
        with pytest.raises(etree.XMLSyntaxError):
            parser.parse("<a><b></a>", parser.strict_parser())

        # The default parser recovers as best it can.
        tree = parser.parse("<a><b></a>")
        assert "a" == tree.getroot().tag

    def test_strict_parser_does_not_resolve_entities(self):
        data = (
            '<!DOCTYPE a [<!ENTITY e "expanded">]>'
            '<a>&e;</a>'
        )
        parser = MockParser()
        tree = parser.parse(data, parser.strict_parser())
        root = tree.getroot()
        assert "expanded" != root.text
        assert "&e;" in etree.tostring(root).decode("utf8")

    def test_local_name(self):
        assert "NCIPMessage" == XMLParser.local_name(
            "{http://www.niso.org/2008/ncip}NCIPMessage"
        )
        assert "version" == XMLParser.local_name("version")
        element = etree.fromstring('<x:a xmlns:x="http://example.com/"/>')
        assert "a" == XMLParser.local_name(element)

    def test_child_elements(self):
        element = etree.fromstring(
            "<a><!-- a comment --><b/><?pi data?><c/></a>"
        )
        assert ["b", "c"] == [
            x.tag for x in XMLParser.child_elements(element)
        ]

