import logging

from .extractors import make_header
from .ils import (
    DefaultILS,
    ILS,
)
from .message import (
    NCIPMessageParser,
    message_type,
)
from .problem import (
    TEMPORARY_PROCESSING_FAILURE,
    Problem,
)
from .response import Response


class Gateway(object):
    """Receives NCIP requests and hands each one to the driver method
    that can answer it.

    Processing a request goes through these steps:

    1. Parse and validate the XML. If this fails, MalformedXml or
       InvalidDocument is raised.
    2. Find the message type. If there isn't one, UnrecognizedMessage
       is raised.
    3. Find a handler: the one the driver publishes for the
       lower-cased message type, or else the one DefaultILS provides.
    4. Call the handler and return its Response unchanged.

    A failure in steps 1 and 2 means there's no NCIP response to send;
    it's up to the caller to reject the request at the protocol level.
    From step 3 on, every failure is reported as a Problem inside a
    Response.
    """

    log = logging.getLogger("NCIP gateway")

    def __init__(self, driver, defaults=None, parser=None):
        """Constructor.

        :param driver: An ILS.
        :param defaults: A DefaultILS to answer the services `driver`
            doesn't support.
        :param parser: An NCIPMessageParser.
        """
        self.driver = driver
        self.defaults = defaults or DefaultILS()
        self.parser = parser or NCIPMessageParser()

    @classmethod
    def from_configuration(cls):
        """Build a Gateway for the driver named in the configuration."""
        return cls(
            ILS.from_configuration(), DefaultILS(),
            NCIPMessageParser.from_configuration()
        )

    def process_request(self, xml):
        """Turn an incoming NCIP document into a Response.

        :param xml: The request as bytes, a string or a file-like object.
        :return: A Response.
        :raise GatewayError: If the request is not a usable NCIP message.
        """
        document = self.parse(xml)
        return self.dispatch(document)

    def parse(self, xml):
        return self.parser.parse_request(xml)

    def handler_for(self, service):
        """Find the callable that answers `service`, e.g. "CheckOutItem"."""
        service = service.lower()
        handler = self.driver.services().get(service)
        if handler is None:
            self.log.debug(
                "%s does not implement %s; using the default",
                self.driver.__class__.__name__, service
            )
            handler = self.defaults.handler_for(service)
        return handler

    def dispatch(self, document):
        """Hand a parsed request to the appropriate handler.

        :param document: A RequestDocument.
        :return: The handler's Response.
        :raise UnrecognizedMessage: If `document` has no message type.
        """
        service = message_type(document)
        handler = self.handler_for(service)
        self.log.info("Handling %s request", service)
        try:
            response = handler(document)
        except Exception as e:
            # Handlers are supposed to report problems, not raise them.
            self.log.exception("Error handling %s request", service)
            response = Response.for_service(
                service, header=make_header(document, service),
                problem=Problem(
                    TEMPORARY_PROCESSING_FAILURE,
                    "Error handling %s request: %s" % (service, e),
                )
            )
        if response.is_problem:
            self.log.info(
                "%s: %s (%s)", response.message_type,
                response.problem.ProblemType, response.problem.ProblemDetail
            )
        return response
