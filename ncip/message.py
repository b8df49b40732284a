"""Turn incoming NCIP XML into RequestDocuments."""
import logging
from collections.abc import Mapping
from types import MappingProxyType

from lxml import etree

from .config import (
    CannotLoadConfiguration,
    Configuration,
)
from .exceptions import (
    InvalidDocument,
    MalformedXml,
    UnrecognizedMessage,
)
from .util.xmlparser import XMLParser

NCIP_NAMESPACE = "http://www.niso.org/2008/ncip"
ENVELOPE = "NCIPMessage"


def freeze(value):
    """Make a parsed value read-only, all the way down."""
    if isinstance(value, Mapping):
        return MappingProxyType(
            dict((k, freeze(v)) for k, v in value.items())
        )
    if isinstance(value, (list, tuple)):
        return tuple(freeze(x) for x in value)
    return value


class RequestDocument(Mapping):
    """A parsed NCIP request.

    The one key whose value is a mapping names the message type
    (e.g. "CheckOutItem") and maps to the body of the message. Any
    other keys hold protocol metadata taken from the envelope, such as
    its `version`, and are always plain strings.

    A RequestDocument can't be changed once it's created.
    """

    def __init__(self, data):
        self._data = dict((k, freeze(v)) for k, v in data.items())

    def __getitem__(self, key):
        return self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __repr__(self):
        return "<RequestDocument %r>" % (self._data,)

    @property
    def message_type(self):
        return message_type(self)

    @property
    def body(self):
        """The fields of the message itself."""
        return self[self.message_type]


def message_type(document):
    """Find the type of the message in `document`: the one top-level
    key whose value is a mapping.

    :raise UnrecognizedMessage: If there is no such key, or more than one.
    """
    candidates = [k for k, v in document.items() if isinstance(v, Mapping)]
    if not candidates:
        raise UnrecognizedMessage("Could not find a message type in the request.")
    if len(candidates) > 1:
        raise UnrecognizedMessage(
            "Request contains more than one message: %s" % ", ".join(
                sorted(candidates)
            )
        )
    return candidates[0]


class NCIPMessageParser(XMLParser):
    """Validate an incoming NCIP document and convert it into a
    RequestDocument.

    The conversion is generic; it knows nothing about the individual
    NCIP messages:

    * Elements are named by their local name; namespaces are dropped.
    * An element with child elements becomes a dict. Its attributes
      become entries in the dict alongside its children.
    * An element with no child elements becomes its (stripped) text.
      Attributes of such an element, like Scheme, are dropped.
    * Sibling elements with the same name become a list.
    """

    ENVELOPE_XPATH = "descendant-or-self::*[local-name()='%s']" % ENVELOPE

    log = logging.getLogger("NCIP message parser")

    def __init__(self, schema=None):
        """Constructor.

        :param schema: An lxml XMLSchema, or the path to an XML Schema
            file. If provided, every incoming document must validate
            against it.
        """
        if isinstance(schema, str):
            schema = self.load_schema(schema)
        self.schema = schema

    @classmethod
    def from_configuration(cls):
        return cls(schema=Configuration.validation_schema())

    @classmethod
    def load_schema(cls, path):
        try:
            return etree.XMLSchema(etree.parse(path))
        except (OSError, etree.XMLSchemaParseError, etree.XMLSyntaxError) as e:
            raise CannotLoadConfiguration(
                "Could not load XML schema %s: %s" % (path, e)
            )

    def parse_request(self, xml):
        """Parse and validate an NCIP request.

        :param xml: The request as bytes, a string or a file-like object.
        :return: A RequestDocument.
        :raise MalformedXml: If `xml` can't be parsed at all.
        :raise InvalidDocument: If `xml` is not a usable NCIP message.
        """
        try:
            tree = self.parse(xml, self.strict_parser())
        except etree.XMLSyntaxError as e:
            raise MalformedXml("Could not parse request: %s" % e, e)

        self.validate(tree)

        documents = list(self.process_all(tree, self.ENVELOPE_XPATH))
        if not documents:
            raise InvalidDocument("Request has no %s element." % ENVELOPE)
        if len(documents) > 1:
            self.log.warning(
                "Request contains %d %s elements; using the first.",
                len(documents), ENVELOPE
            )
        document = documents[0]
        self.log.debug("Parsed %s request", document.message_type)
        return document

    def validate(self, tree):
        """Make sure `tree` is valid according to its internal DTD, if it
        has one, and according to the configured schema, if there is one.

        :raise InvalidDocument: If validation fails.
        """
        dtd = tree.docinfo.internalDTD
        if dtd is not None and not dtd.validate(tree):
            raise InvalidDocument(
                "Request does not validate against its DTD: %s" % (
                    dtd.error_log
                )
            )
        if self.schema is not None and not self.schema.validate(tree):
            raise InvalidDocument(
                "Request does not validate against the NCIP schema: %s" % (
                    self.schema.error_log
                )
            )

    def process_one(self, envelope, namespaces):
        """Turn an NCIPMessage element into a RequestDocument."""
        namespace = etree.QName(envelope).namespace
        if namespace not in (None, NCIP_NAMESPACE):
            self.log.info("Ignoring %s in namespace %s", ENVELOPE, namespace)
            return None

        children = self.child_elements(envelope)
        if not children:
            raise InvalidDocument("%s element contains no message." % ENVELOPE)
        if len(children) > 1:
            raise InvalidDocument(
                "%s element contains more than one message: %s" % (
                    ENVELOPE,
                    ", ".join(self.local_name(x) for x in children)
                )
            )
        [message] = children

        data = dict(
            (self.local_name(k), v) for k, v in envelope.attrib.items()
        )
        body = self.element_value(message)
        if not isinstance(body, dict):
            # A message with no fields at all is still a message.
            body = self.attributes(message)
        data[self.local_name(message)] = body
        return RequestDocument(data)

    def attributes(self, tag):
        return dict((self.local_name(k), v) for k, v in tag.attrib.items())

    def element_value(self, tag):
        """Convert an element into a string or a dict."""
        children = self.child_elements(tag)
        if not children:
            return (tag.text or "").strip()

        fields = {}
        for child in children:
            fields.setdefault(self.local_name(child), []).append(
                self.element_value(child)
            )
        value = self.attributes(tag)
        for name, values in fields.items():
            if len(values) == 1:
                value[name] = values[0]
            else:
                value[name] = values
        return value
