"""An ILS driver that keeps its patrons, items and requests in memory.

It implements every core NCIP service and is used to exercise the
gateway end to end. It's also the place to look when writing a driver
for a real ILS: each handler shows what to extract from the request,
which problems to report and what shape the response data takes.
"""
import datetime
import itertools
import logging
from collections.abc import Mapping

from ..extractors import (
    find_bibliographic_ids,
    find_item_identifier,
    find_user_identifier,
    find_value,
    make_header,
)
from ..problem import (
    DUPLICATE_ITEM,
    DUPLICATE_REQUEST,
    ITEM_ALREADY_CHECKED_OUT,
    ITEM_DOES_NOT_CIRCULATE,
    ITEM_NOT_CHECKED_OUT,
    ITEM_NOT_CHECKED_OUT_TO_THIS_USER,
    ITEM_NOT_RENEWABLE,
    MAXIMUM_RENEWALS_EXCEEDED,
    REQUEST_ITEM_NOT_FOUND,
    UNAUTHORIZED_COMBINATION,
    UNKNOWN_ITEM,
    UNKNOWN_REQUEST,
    UNKNOWN_USER,
    USER_BLOCKED,
    Problem,
)
from ..response import Response
from ..util import listify
from . import (
    ACCEPT_ITEM,
    CANCEL_REQUEST_ITEM,
    CHECK_IN_ITEM,
    CHECK_OUT_ITEM,
    ILS,
    LOOKUP_USER,
    RENEW_ITEM,
    REQUEST_ITEM,
)


class MockPatron(object):

    def __init__(self, barcode, surname=None, given_name=None, email=None,
                 blocked=False):
        self.barcode = barcode
        self.surname = surname
        self.given_name = given_name
        self.email = email
        self.blocked = blocked


class MockItem(object):

    def __init__(self, barcode, title=None, author=None,
                 bibliographic_id=None, circulates=True, renewable=True):
        self.barcode = barcode
        self.title = title
        self.author = author
        self.bibliographic_id = bibliographic_id
        self.circulates = circulates
        self.renewable = renewable

        # Set when the item is checked out.
        self.patron = None
        self.due = None
        self.renewals = 0


class MockRequest(object):

    def __init__(self, id, patron, target, scope, request_type=None,
                 pickup_location=None):
        self.id = id
        self.patron = patron
        self.target = target
        self.scope = scope
        self.request_type = request_type
        self.pickup_location = pickup_location


class MockILS(ILS):
    """An in-memory ILS.

    Patrons and items can be passed in through the driver settings in
    the configuration file:

        "ils": {
            "driver": "mock",
            "settings": {
                "patrons": {"12345": {"surname": "Smith"}},
                "items": {"B1": {"title": "Moby Dick"}}
            }
        }
    """

    log = logging.getLogger("Mock ILS")

    DEFAULT_LOAN_PERIOD = 21
    DEFAULT_MAX_RENEWALS = 2

    ITEM_SCOPE = "Item"
    BIBLIOGRAPHIC_SCOPE = "Bibliographic Item"

    def __init__(self, patrons=None, items=None, agency_id=None,
                 loan_period=None, max_renewals=None, now=None):
        self.patrons = {}
        self.items = {}
        self.requests = {}
        self.agency_id = agency_id
        self.loan_period = datetime.timedelta(
            days=loan_period or self.DEFAULT_LOAN_PERIOD
        )
        if max_renewals is None:
            max_renewals = self.DEFAULT_MAX_RENEWALS
        self.max_renewals = max_renewals
        self._now = now
        self._request_ids = itertools.count(1)

        for barcode, kwargs in (patrons or {}).items():
            self.add_patron(barcode, **kwargs)
        for barcode, kwargs in (items or {}).items():
            self.add_item(barcode, **kwargs)

    def now(self):
        if self._now:
            return self._now
        return datetime.datetime.now(tz=datetime.timezone.utc)

    def add_patron(self, barcode, **kwargs):
        patron = MockPatron(barcode, **kwargs)
        self.patrons[barcode] = patron
        return patron

    def add_item(self, barcode, **kwargs):
        item = MockItem(barcode, **kwargs)
        self.items[barcode] = item
        return item

    def services(self):
        return {
            LOOKUP_USER: self.lookupuser,
            CHECK_OUT_ITEM: self.checkoutitem,
            CHECK_IN_ITEM: self.checkinitem,
            RENEW_ITEM: self.renewitem,
            REQUEST_ITEM: self.requestitem,
            CANCEL_REQUEST_ITEM: self.cancelrequestitem,
            ACCEPT_ITEM: self.acceptitem,
        }

    # Helpers shared by the handlers.

    def _response(self, document, message_type):
        return dict(
            message_type=Response.response_type(message_type),
            header=make_header(document, message_type),
        )

    def _patron(self, document, message_type, default=None):
        """Find the patron a request is about.

        :return: A 2-tuple (patron, problem). Exactly one is None.
        """
        result = find_user_identifier(document, message_type, default)
        if result.is_err:
            return None, result.error
        barcode, field = result.value
        patron = self.patrons.get(barcode)
        if not patron:
            return None, Problem(
                UNKNOWN_USER,
                "User with barcode %s unknown" % barcode,
                field, barcode
            )
        return patron, None

    def _item(self, document, message_type):
        """Find the item a request is about.

        :return: A 2-tuple (item, problem). Exactly one is None.
        """
        result = find_item_identifier(document, message_type)
        if result.is_err:
            return None, result.error
        barcode, field = result.value
        item = self.items.get(barcode)
        if not item:
            return None, Problem(
                UNKNOWN_ITEM,
                "Item with barcode %s is not known." % barcode,
                field, barcode
            )
        return item, None

    def _blocked(self, patron):
        if patron.blocked:
            return Problem(
                USER_BLOCKED,
                "User is blocked from this operation.",
                "UserIdentifierValue", patron.barcode
            )
        return None

    def _item_id(self, barcode):
        item_id = dict(
            ItemIdentifierType="Barcode",
            ItemIdentifierValue=barcode,
        )
        if self.agency_id:
            item_id = dict(AgencyId=self.agency_id, **item_id)
        return item_id

    def _user_id(self, barcode):
        return dict(
            UserIdentifierType="Barcode Id",
            UserIdentifierValue=barcode,
        )

    def _request_id(self, request):
        return dict(
            RequestIdentifierType="SYSNUMBER",
            RequestIdentifierValue=str(request.id),
        )

    def _date(self, value):
        return value.isoformat()

    # Handlers

    def lookupuser(self, document):
        message_type = document.message_type
        response = self._response(document, message_type)
        patron, problem = self._patron(document, message_type)
        if problem:
            return Response(problem=problem, **response)

        data = dict(UserId=[self._user_id(patron.barcode)])

        elements = listify(document[message_type].get("UserElementType"))
        optional = {}
        if "Name Information" in elements:
            optional["NameInformation"] = dict(
                PersonalNameInformation=dict(
                    StructuredPersonalUserName=dict(
                        GivenName=patron.given_name,
                        Surname=patron.surname,
                    )
                )
            )
        if "User Address Information" in elements and patron.email:
            optional["UserAddressInformation"] = [dict(
                UserAddressRoleType="Email Address",
                ElectronicAddress=dict(
                    ElectronicAddressType="mailto",
                    ElectronicAddressData=patron.email,
                ),
            )]
        if "Block Or Trap" in elements and patron.blocked:
            optional["BlockOrTrap"] = [dict(
                AgencyId=self.agency_id,
                BlockOrTrapType="Block Checkout",
            )]
        if optional:
            data["UserOptionalFields"] = optional
        return Response(data=data, **response)

    def checkoutitem(self, document):
        message_type = document.message_type
        response = self._response(document, message_type)

        patron, problem = self._patron(document, message_type)
        if problem:
            return Response(problem=problem, **response)
        problem = self._blocked(patron)
        if problem:
            return Response(problem=problem, **response)

        item, problem = self._item(document, message_type)
        if problem:
            return Response(problem=problem, **response)
        if not item.circulates:
            return Response(problem=Problem(
                ITEM_DOES_NOT_CIRCULATE,
                "Item with barcode %s does not circulate." % item.barcode,
                "ItemIdentifierValue", item.barcode
            ), **response)
        if item.patron is not None:
            # Even when the item is checked out to this very patron.
            # Renewals go through RenewItem.
            return Response(problem=Problem(
                ITEM_ALREADY_CHECKED_OUT,
                "Item with barcode %s is already checked out." % item.barcode,
                "ItemIdentifierValue", item.barcode
            ), **response)

        item.patron = patron
        item.due = self.now() + self.loan_period
        item.renewals = 0
        self.log.info("Checked out %s to %s", item.barcode, patron.barcode)

        data = dict(
            ItemId=self._item_id(item.barcode),
            UserId=self._user_id(patron.barcode),
            DateDue=self._date(item.due),
        )
        return Response(data=data, **response)

    def checkinitem(self, document):
        message_type = document.message_type
        response = self._response(document, message_type)

        item, problem = self._item(document, message_type)
        if problem:
            return Response(problem=problem, **response)

        # The patron is optional, but if one is named they must exist.
        patron = None
        result = find_user_identifier(document, message_type)
        if result.is_ok:
            patron, problem = self._patron(document, message_type)
            if problem:
                return Response(problem=problem, **response)

        if item.patron is None:
            return Response(problem=Problem(
                ITEM_NOT_CHECKED_OUT,
                "Item with barcode %s is not checked out." % item.barcode,
                "ItemIdentifierValue", item.barcode
            ), **response)
        if patron is not None and item.patron is not patron:
            return Response(problem=Problem(
                ITEM_NOT_CHECKED_OUT_TO_THIS_USER,
                "Item with barcode %s is not checked out to this user." % (
                    item.barcode
                ),
                "UserIdentifierValue", patron.barcode
            ), **response)

        borrower = item.patron
        item.patron = None
        item.due = None
        item.renewals = 0
        self.log.info("Checked in %s from %s", item.barcode, borrower.barcode)

        data = dict(
            ItemId=self._item_id(item.barcode),
            UserId=self._user_id(borrower.barcode),
        )
        return Response(data=data, **response)

    def renewitem(self, document):
        message_type = document.message_type
        response = self._response(document, message_type)

        patron, problem = self._patron(document, message_type)
        if problem:
            return Response(problem=problem, **response)
        problem = self._blocked(patron)
        if problem:
            return Response(problem=problem, **response)

        item, problem = self._item(document, message_type)
        if problem:
            return Response(problem=problem, **response)
        if item.patron is None:
            return Response(problem=Problem(
                ITEM_NOT_CHECKED_OUT,
                "Item with barcode %s is not checked out." % item.barcode,
                "ItemIdentifierValue", item.barcode
            ), **response)
        if item.patron is not patron:
            return Response(problem=Problem(
                ITEM_NOT_CHECKED_OUT_TO_THIS_USER,
                "Item with barcode %s is not checked out to this user." % (
                    item.barcode
                ),
                "UserIdentifierValue", patron.barcode
            ), **response)
        if not item.renewable:
            return Response(problem=Problem(
                ITEM_NOT_RENEWABLE,
                "Item may not be renewed.",
                "ItemIdentifierValue", item.barcode
            ), **response)
        if item.renewals >= self.max_renewals:
            return Response(problem=Problem(
                MAXIMUM_RENEWALS_EXCEEDED,
                "Renewal cannot proceed because the User has already renewed the Item the maximum number of times permitted.",
                "ItemIdentifierValue", item.barcode
            ), **response)

        item.renewals += 1
        item.due = self.now() + self.loan_period

        data = dict(
            ItemId=self._item_id(item.barcode),
            UserId=self._user_id(patron.barcode),
            DateDue=self._date(item.due),
        )
        return Response(data=data, **response)

    def requestitem(self, document):
        message_type = document.message_type
        response = self._response(document, message_type)

        # Patrons are the most likely source of trouble, so check them
        # first.
        patron, problem = self._patron(document, message_type)
        if problem:
            return Response(problem=problem, **response)
        problem = self._blocked(patron)
        if problem:
            return Response(problem=problem, **response)

        # An item barcode wins over bibliographic ids.
        target = None
        scope = None
        item_result = find_item_identifier(document, message_type)
        if item_result.is_ok:
            item, problem = self._item(document, message_type)
            if problem:
                return Response(problem=problem, **response)
            target, scope = item.barcode, self.ITEM_SCOPE
        else:
            item = self._item_for_bibliographic_ids(
                find_bibliographic_ids(document, message_type)
            )
            if item is not None:
                target, scope = item.bibliographic_id, self.BIBLIOGRAPHIC_SCOPE

        if target is None:
            if find_bibliographic_ids(document, message_type):
                problem = Problem(
                    REQUEST_ITEM_NOT_FOUND,
                    "Unable to determine the item to request from input message.",
                )
            else:
                problem = item_result.error
            return Response(problem=problem, **response)

        for existing in self.requests.values():
            if existing.patron is patron and existing.target == target:
                return Response(problem=Problem(
                    DUPLICATE_REQUEST,
                    "User already has a request for this item.",
                    "UserIdentifierValue", patron.barcode
                ), **response)

        pickup_location = find_value(document, message_type, "PickupLocation")
        if pickup_location:
            # Some clients send "agency:location"; keep the location.
            pickup_location = pickup_location.rpartition(":")[2]

        request = self._place_request(
            patron, target, scope,
            find_value(document, message_type, "RequestType"),
            pickup_location
        )
        data = dict(
            RequestId=self._request_id(request),
            UserId=self._user_id(patron.barcode),
            RequestType=request.request_type,
            RequestScopeType=request.scope,
        )
        return Response(data=data, **response)

    def _item_for_bibliographic_ids(self, bibliographic_ids):
        identifiers = []
        for name, value in bibliographic_ids:
            if name == "BibliographicRecordId":
                identifier = value.get("BibliographicRecordIdentifier")
            else:
                identifier = value.get("BibliographicItemIdentifier")
            if isinstance(identifier, str) and identifier:
                identifiers.append(identifier)
        for identifier in identifiers:
            for item in self.items.values():
                if item.bibliographic_id == identifier:
                    return item
        return None

    def _place_request(self, patron, target, scope, request_type=None,
                       pickup_location=None):
        request = MockRequest(
            next(self._request_ids), patron, target, scope,
            request_type, pickup_location
        )
        self.requests[request.id] = request
        self.log.info(
            "Placed request %s on %s for %s", request.id, target,
            patron.barcode
        )
        return request

    def cancelrequestitem(self, document):
        message_type = document.message_type
        response = self._response(document, message_type)

        patron, problem = self._patron(document, message_type)
        if problem:
            return Response(problem=problem, **response)

        request_id = find_value(
            document, message_type, "RequestId", "RequestIdentifierValue"
        )
        request = None
        if request_id and request_id.isdigit():
            request = self.requests.get(int(request_id))
        if request is None or request.patron is not patron:
            return Response(problem=Problem(
                UNKNOWN_REQUEST,
                "No request %s found for this user." % request_id,
                "RequestIdentifierValue", request_id
            ), **response)

        del self.requests[request.id]
        data = dict(
            RequestId=self._request_id(request),
            UserId=self._user_id(patron.barcode),
        )
        return Response(data=data, **response)

    def acceptitem(self, document):
        message_type = document.message_type
        response = self._response(document, message_type)

        action = find_value(document, message_type, "RequestedActionType")
        if not action or not action.lower().startswith("hold"):
            return Response(problem=Problem(
                UNAUTHORIZED_COMBINATION,
                "We only support Hold For Pickup",
                "RequestedActionType", action
            ), **response)

        result = find_item_identifier(document, message_type)
        if result.is_err:
            return Response(problem=result.error, **response)
        barcode, field = result.value

        patron, problem = self._patron(
            document, message_type, "UserIdentifierValue"
        )
        if problem:
            return Response(problem=problem, **response)
        problem = self._blocked(patron)
        if problem:
            return Response(problem=problem, **response)

        if barcode in self.items:
            # The items created here are temporary; one that already
            # exists means a previous AcceptItem was never cleaned up.
            return Response(problem=Problem(
                DUPLICATE_ITEM,
                "Item with barcode %s already exists." % barcode,
                field, barcode
            ), **response)

        item = self.add_item(
            barcode,
            title=find_value(
                document, message_type, "ItemOptionalFields",
                "BibliographicDescription", "Title"
            ),
            author=find_value(
                document, message_type, "ItemOptionalFields",
                "BibliographicDescription", "Author"
            ),
        )
        self._place_request(
            patron, item.barcode, self.ITEM_SCOPE,
            pickup_location=find_value(document, message_type, "PickupLocation")
        )

        # Echo back the identifiers the client sent.
        data = dict(ItemId=self._item_id(barcode))
        request_id = document[message_type].get("RequestId")
        if isinstance(request_id, Mapping):
            data["RequestId"] = dict(request_id)
        return Response(data=data, **response)
