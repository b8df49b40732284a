"""NCIP Problem elements.

A Problem is how a driver tells the NCIP client that a request could
not be carried out. It travels inside an ordinary Response in place of
the response data.
"""
import logging
from collections import namedtuple

# Values of ProblemType used by the gateway itself.
UNSUPPORTED_SERVICE = "Unsupported Service"
NEEDED_DATA_MISSING = "Needed Data Missing"
TEMPORARY_PROCESSING_FAILURE = "Temporary Processing Failure"

# Values of ProblemType commonly reported by drivers.
UNKNOWN_USER = "Unknown User"
UNKNOWN_ITEM = "Unknown Item"
UNKNOWN_REQUEST = "Unknown Request"
USER_BLOCKED = "User Blocked"
ITEM_DOES_NOT_CIRCULATE = "Item Does Not Circulate"
ITEM_ALREADY_CHECKED_OUT = "Item Already Checked Out"
ITEM_NOT_CHECKED_OUT = "Item Not Checked Out"
ITEM_NOT_CHECKED_OUT_TO_THIS_USER = "Item Not Checked Out To This User"
ITEM_NOT_RENEWABLE = "Item Not Renewable"
MAXIMUM_RENEWALS_EXCEEDED = "Maximum Renewals Exceeded"
DUPLICATE_ITEM = "Duplicate Item"
DUPLICATE_REQUEST = "Duplicate Request"
REQUEST_ITEM_NOT_FOUND = "Request Item Not Found"
UNAUTHORIZED_COMBINATION = "Unauthorized Combination Of Element Values For System"

# ProblemElement and ProblemValue when there is nothing to point at.
NULL = "NULL"

log = logging.getLogger("NCIP problem")


class Problem(namedtuple(
        "Problem",
        "ProblemType ProblemDetail ProblemElement ProblemValue Scheme")):
    """One reportable failure.

    :param ProblemType: What went wrong, from the NCIP problem vocabulary.
    :param ProblemDetail: A human-readable explanation.
    :param ProblemElement: The name of the request element that caused
        the problem, or "NULL".
    :param ProblemValue: The offending value of that element, or "NULL".
    :param Scheme: Optional URI of the vocabulary ProblemType comes from.
    """

    __slots__ = ()

    def __new__(cls, ProblemType, ProblemDetail=None, ProblemElement=None,
                ProblemValue=None, Scheme=None):
        if not ProblemType:
            raise ValueError("A Problem must have a ProblemType.")
        return super(Problem, cls).__new__(
            cls, ProblemType, ProblemDetail,
            ProblemElement or NULL, ProblemValue or NULL, Scheme
        )

    def with_element_and_value(self, element, value=None):
        """Return a copy of this Problem attributed to a different
        request element.
        """
        return self._replace(
            ProblemElement=element or NULL, ProblemValue=value or NULL
        )

    def as_dict(self):
        d = self._asdict()
        if d['Scheme'] is None:
            del d['Scheme']
        return d


def problem_from_event(problem_type, event, element=None, value=None):
    """Turn an error reported by an ILS into a Problem.

    :param problem_type: The ProblemType to report. If this is None,
        the event's own code is used.
    :param event: Either a dictionary describing the error, as
        returned by many ILS APIs, or a string to use as the
        ProblemDetail.
    :param element: The request element that caused the problem.
    :param value: The value of that element.
    """
    if isinstance(event, dict):
        nested = event.get('ilsevent') or {}
        textcode = nested.get('textcode') or event.get('textcode')
        desc = event.get('desc') or nested.get('desc')
        problem_type = problem_type or textcode

        if desc:
            detail = desc
        elif textcode == 'PERM_FAILURE' and event.get('ilsperm'):
            permission = event['ilsperm']
            if permission.endswith('.override'):
                permission = permission[:-len('.override')]
            detail = "Permission denied: %s" % permission
        elif textcode:
            detail = "ILS returned %s error." % textcode
        else:
            detail = None
    else:
        detail = event

    if not problem_type:
        log.warning("ILS event has no type: %r", event)
    return Problem(
        problem_type or TEMPORARY_PROCESSING_FAILURE,
        detail or "Detail not available.",
        element, value
    )
