from flask_babel import lazy_gettext as _

from .util.problem_detail import ProblemDetail as pd

MALFORMED_XML = pd(
      "http://librarysimplified.org/terms/problem/ncip/malformed-xml",
      400,
      _("Malformed XML."),
      _("The request body could not be parsed as XML."),
)

INVALID_NCIP_MESSAGE = pd(
      "http://librarysimplified.org/terms/problem/ncip/invalid-message",
      400,
      _("Invalid NCIP message."),
      _("The request is not a valid NCIP message."),
)

UNRECOGNIZED_MESSAGE = pd(
      "http://librarysimplified.org/terms/problem/ncip/unrecognized-message",
      400,
      _("Unrecognized NCIP message."),
      _("No NCIP message type could be found in the request."),
)

NO_MESSAGE = pd(
      "http://librarysimplified.org/terms/problem/ncip/no-message",
      400,
      _("No NCIP message."),
      _("Send an NCIP message as the request body, or as the 'xml' query parameter."),
)
