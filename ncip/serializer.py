"""Turn Responses into NCIP XML documents."""
import datetime
from collections.abc import Mapping

from lxml import builder, etree

from .config import Configuration
from .message import (
    ENVELOPE,
    NCIP_NAMESPACE,
)


class ResponseSerializer(object):
    """Render a Response as an NCIPMessage document.

    Response data is converted generically: a dict becomes a set of
    child elements in the dict's order, a list or tuple becomes
    repeated elements, None is left out and everything else becomes
    text.
    """

    MEDIA_TYPE = "application/xml"

    nsmap = {None: NCIP_NAMESPACE}

    default_typemap = {
        datetime.datetime: lambda e, v: v.isoformat(),
        datetime.date: lambda e, v: v.isoformat(),
        int: lambda e, v: str(v),
        float: lambda e, v: str(v),
        bool: lambda e, v: "true" if v else "false",
    }

    E = builder.ElementMaker(
        typemap=default_typemap, nsmap=nsmap, namespace=NCIP_NAMESPACE
    )

    # Data keys that don't map one-to-one onto an NCIP element name.
    RENAMED_KEYS = {
        "versions": "VersionSupported",
    }

    PROBLEM_FIELDS = (
        "ProblemType", "ProblemDetail", "ProblemElement", "ProblemValue"
    )

    def __init__(self, version=None):
        """Constructor.

        :param version: The NCIP version to claim in the envelope's
            `version` attribute. Defaults to the first configured
            supported version.
        """
        if version is None:
            version = Configuration.supported_versions()[0]
        self.version = version

    def serialize(self, response, pretty_print=False):
        """Turn `response` into a bytestring of XML."""
        return etree.tostring(
            self.to_element(response), xml_declaration=True,
            encoding="UTF-8", pretty_print=pretty_print
        )

    def to_element(self, response):
        message = self.E(response.message_type)
        if response.header is not None:
            message.append(self.header(response.header))
        if response.is_problem:
            message.append(self.problem(response.problem))
        elif response.data is not None:
            self.append_value(message, None, response.data)
        envelope = self.E(ENVELOPE, message)
        if self.version:
            envelope.set("version", self.version)
        return envelope

    def header(self, header):
        return self.E.ResponseHeader(
            self.E.FromAgencyId(self.E.AgencyId(header.FromAgencyId)),
            self.E.ToAgencyId(self.E.AgencyId(header.ToAgencyId)),
        )

    def problem(self, problem):
        tag = self.E.Problem()
        for field in self.PROBLEM_FIELDS:
            value = getattr(problem, field)
            if value is None:
                continue
            element = self.E(field, str(value))
            if field == "ProblemType" and problem.Scheme:
                element.set("Scheme", problem.Scheme)
            tag.append(element)
        return tag

    def append_value(self, parent, name, value):
        """Add `value` to `parent` as one or more elements called `name`.

        If `name` is None, a dict's entries are added directly to
        `parent`.
        """
        if value is None:
            return
        if isinstance(value, Mapping):
            if name is None:
                target = parent
            else:
                target = self.E(name)
                parent.append(target)
            for key, child in value.items():
                self.append_value(
                    target, self.RENAMED_KEYS.get(key, key), child
                )
        elif isinstance(value, (list, tuple)):
            for child in value:
                self.append_value(parent, name, child)
        elif name is not None:
            parent.append(self.E(name, value))
