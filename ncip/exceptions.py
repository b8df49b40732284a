class BaseError(Exception):
    """Base class for all errors"""

    def __init__(self, message=None, inner_exception=None):
        """Initializes a new instance of BaseError class

        :param message: String containing description of the error occurred
        :param inner_exception: (Optional) Inner exception
        """
        if inner_exception and not message:
            message = str(inner_exception)

        super(BaseError, self).__init__(message)

        self._inner_exception = str(inner_exception) if inner_exception else None

    @property
    def inner_exception(self):
        """Returns an inner exception

        :return: Inner exception
        :rtype: Exception
        """
        return self._inner_exception

    def __eq__(self, other):
        """Compares two BaseError objects

        :param other: BaseError object
        :type other: BaseError

        :return: Boolean value indicating whether two items are equal
        :rtype: bool
        """
        if not isinstance(other, BaseError):
            return False

        return str(self) == str(other)

    def __hash__(self):
        return hash(str(self))

    def __repr__(self):
        return '<{0}(message={1}, inner_exception={2})>'.format(
            self.__class__.__name__,
            str(self),
            self.inner_exception
        )


class IntegrationException(Exception):
    """An exception that happens when the site's connection to an ILS
    or other third-party service is broken.

    This may be because communication failed
    (RemoteIntegrationException), or because local configuration is
    missing or obviously wrong (CannotLoadConfiguration).
    """

    def __init__(self, message, debug_message=None):
        """Constructor.

        :param message: The normal message passed to any Exception
        constructor.

        :param debug_message: An extra human-readable explanation of the
        problem, shown to admins but not to patrons.
        """
        super(IntegrationException, self).__init__(message)
        self.debug_message = debug_message


class GatewayError(BaseError):
    """The gateway could not make sense of an incoming request.

    These errors are structural: they happen before a message type and
    driver handler have been chosen, so no NCIP response can be built
    for them. `status_code` is the HTTP status code that should be
    returned to the client.
    """
    status_code = 400

    def as_problem_detail_document(self, debug=False):
        """Return a suitable problem detail document."""
        from .problem_details import INVALID_NCIP_MESSAGE
        return INVALID_NCIP_MESSAGE.with_debug(str(self))


class MalformedXml(GatewayError):
    """The request body is not well-formed XML."""

    def as_problem_detail_document(self, debug=False):
        from .problem_details import MALFORMED_XML
        if debug:
            return MALFORMED_XML.with_debug(str(self))
        return MALFORMED_XML


class InvalidDocument(GatewayError):
    """The request is well-formed XML but not a usable NCIP message:
    there is no NCIPMessage envelope, the envelope does not contain
    exactly one message, or the document fails validation.
    """
    pass


class UnrecognizedMessage(GatewayError):
    """No message type could be found in a parsed request."""

    def as_problem_detail_document(self, debug=False):
        from .problem_details import UNRECOGNIZED_MESSAGE
        return UNRECOGNIZED_MESSAGE
