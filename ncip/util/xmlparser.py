from io import BytesIO

from lxml import etree


class XMLParser(object):

    """Helper functions to process XML data."""

    @classmethod
    def local_name(cls, tag):
        """Strip the namespace from an element or attribute name."""
        if not isinstance(tag, str):
            tag = tag.tag
        return etree.QName(tag).localname

    @classmethod
    def child_elements(cls, tag):
        """The element children of `tag`, skipping comments, processing
        instructions and entities.
        """
        return [x for x in tag if isinstance(x.tag, str)]

    def strict_parser(self):
        """An lxml parser that refuses to recover from broken markup
        and never fetches anything over the network.
        """
        return etree.XMLParser(
            recover=False, resolve_entities=False, no_network=True,
            remove_comments=True, remove_pis=True,
        )

    def parse(self, xml, parser=None):
        """Parse `xml` (bytes, a string or a file-like object) into an
        lxml ElementTree.
        """
        if not parser:
            parser = etree.XMLParser(recover=True)
        if hasattr(xml, 'read'):
            xml = xml.read()
        if isinstance(xml, str):
            xml = xml.encode("utf8")

        # XMLParser can handle most characters and entities that are
        # invalid in XML but it will stop processing a document if it
        # encounters the null character. Remove that character
        # immediately and XMLParser will handle the rest.
        xml = xml.replace(b"\x00", b"")
        return etree.parse(BytesIO(xml), parser)

    def process_all(self, xml, xpath, namespaces=None, handler=None, parser=None):
        if not handler:
            handler = self.process_one
        if isinstance(xml, (str, bytes)) or hasattr(xml, 'read'):
            root = self.parse(xml, parser)
        else:
            root = xml

        for i in root.xpath(xpath, namespaces=namespaces):
            data = handler(i, namespaces)
            if data is not None:
                yield data

    def process_one(self, tag, namespaces):
        return None
