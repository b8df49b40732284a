from collections import namedtuple

from .problem import Problem


class Header(namedtuple("Header", "FromAgencyId ToAgencyId")):
    """The ResponseHeader of an NCIP response.

    It is always derived from the request's InitiationHeader, with the
    two agencies swapped: the agency that sent the request is the one
    that receives the response.
    """

    __slots__ = ()


class Response(object):
    """What a driver handler returns for a single NCIP request.

    A Response carries either `data` (the body of a successful
    response) or `problem` (a Problem explaining why the request
    failed), never both.
    """

    def __init__(self, message_type, header=None, data=None, problem=None):
        if data is not None and problem is not None:
            raise ValueError(
                "A Response may carry data or a Problem, not both."
            )
        if problem is not None and not isinstance(problem, Problem):
            raise ValueError("%r is not a Problem" % (problem,))
        if header is not None and not isinstance(header, Header):
            raise ValueError("%r is not a Header" % (header,))
        self._message_type = message_type
        self._header = header
        self._data = data
        self._problem = problem

    @classmethod
    def for_service(cls, service, **kwargs):
        """Build a response to the given NCIP service, e.g.
        Response.for_service("CheckOutItem", ...) is a
        CheckOutItemResponse.
        """
        return cls(cls.response_type(service), **kwargs)

    @classmethod
    def response_type(cls, service):
        if service.endswith("Response"):
            return service
        return service + "Response"

    @property
    def message_type(self):
        return self._message_type

    @property
    def header(self):
        return self._header

    @property
    def data(self):
        return self._data

    @property
    def problem(self):
        return self._problem

    @property
    def is_problem(self):
        return self._problem is not None

    def __eq__(self, other):
        if not isinstance(other, Response):
            return False
        return (
            self.message_type, self.header, self.data, self.problem
        ) == (
            other.message_type, other.header, other.data, other.problem
        )

    def __repr__(self):
        if self.is_problem:
            payload = "problem=%r" % (self.problem,)
        else:
            payload = "data=%r" % (self.data,)
        return "<Response %s header=%r %s>" % (
            self.message_type, self.header, payload
        )
