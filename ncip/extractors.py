"""Find the values drivers need inside a RequestDocument.

NCIP lets a client identify the same patron or item in more than one
way. These functions pick one identifier deterministically, preferring
identifiers that are explicitly typed as barcodes and never returning
one that is explicitly typed as something else.

None of these functions raise when data is missing. The barcode finders
return a Result; the others return None or an empty list.
"""
from collections.abc import Mapping

from .problem import (
    NEEDED_DATA_MISSING,
    Problem,
)
from .response import Header
from .result import Result
from .util import listify

LOOKUP_USER = "LookupUser"
LOOKUP_VERSION = "LookupVersion"


def _body(document, message_type):
    body = document.get(message_type)
    if isinstance(body, Mapping):
        return body
    return {}


def _looks_like_barcode(identifier_type):
    return "barcode" in identifier_type.lower()


def _first_barcode(entries, type_field, value_field):
    """Return the first identifier value in `entries` that is either
    untyped or typed as a barcode.
    """
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        identifier_type = entry.get(type_field)
        if identifier_type is not None and not _looks_like_barcode(
                str(identifier_type)):
            continue
        value = entry.get(value_field)
        if isinstance(value, str) and value:
            return value
    return None


def find_item_identifier(document, message_type, default=None):
    """Find the barcode of the item a request is about.

    :param document: A RequestDocument.
    :param message_type: The type of the message in `document`.
    :param default: The ProblemElement to blame if no barcode is found.
    :return: Result.ok((barcode, field name)) or Result.err(Problem).
    """
    body = _body(document, message_type)
    barcode = _first_barcode(
        listify(body.get("ItemId")), "ItemIdentifierType",
        "ItemIdentifierValue"
    )
    if barcode is not None:
        return Result.ok((barcode, "ItemIdentifierValue"))
    return Result.err(Problem(
        NEEDED_DATA_MISSING, "Cannot find item barcode in message.",
        default or "ItemIdentifierValue", None
    ))


def find_user_identifier(document, message_type, default=None):
    """Find the barcode of the patron a request is about.

    A LookupUser message may identify the patron through
    AuthenticationInput instead of UserId. That is only consulted when
    there is no UserId at all.

    :param document: A RequestDocument.
    :param message_type: The type of the message in `document`.
    :param default: The ProblemElement to blame if no barcode is found.
    :return: Result.ok((barcode, field name)) or Result.err(Problem).
    """
    body = _body(document, message_type)
    user_ids = listify(body.get("UserId"))
    if message_type == LOOKUP_USER and not user_ids:
        barcode = _first_authentication_barcode(
            listify(body.get("AuthenticationInput"))
        )
        field = "AuthenticationInputData"
        element = default or "AuthenticationInputType"
    else:
        barcode = _first_barcode(
            user_ids, "UserIdentifierType", "UserIdentifierValue"
        )
        field = "UserIdentifierValue"
        element = default or "UserIdentifierValue"

    if barcode is not None:
        return Result.ok((barcode, field))
    return Result.err(Problem(
        NEEDED_DATA_MISSING, "Cannot find user barcode in message.",
        element, None
    ))


def _first_authentication_barcode(entries):
    # Unlike UserId, an AuthenticationInput entry is only usable when it
    # says it's a barcode; PINs and passwords travel the same way.
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        input_type = entry.get("AuthenticationInputType")
        if not isinstance(input_type, str) or not _looks_like_barcode(input_type):
            continue
        value = entry.get("AuthenticationInputData")
        if isinstance(value, str) and value:
            return value
    return None


def find_authentication_input(document, message_type, input_type):
    """Find the AuthenticationInputData of the given type (e.g.
    "PIN"), compared case-insensitively, or None.
    """
    body = _body(document, message_type)
    for entry in listify(body.get("AuthenticationInput")):
        if not isinstance(entry, Mapping):
            continue
        this_type = entry.get("AuthenticationInputType")
        if isinstance(this_type, str) and this_type.lower() == input_type.lower():
            return entry.get("AuthenticationInputData")
    return None


def find_bibliographic_ids(document, message_type):
    """Find the bibliographic identifiers in a request.

    :return: A list of BibliographicRecordId and BibliographicItemId
        mappings, in document order. Each is paired with the name of
        the element it came from: [(name, mapping), ...].
    """
    body = _body(document, message_type)
    found = []
    for bibliographic_id in listify(body.get("BibliographicId")):
        if not isinstance(bibliographic_id, Mapping):
            continue
        for name in ("BibliographicRecordId", "BibliographicItemId"):
            for value in listify(bibliographic_id.get(name)):
                if isinstance(value, Mapping):
                    found.append((name, value))
    return found


def find_value(document, message_type, *path):
    """Follow `path` through the body of a message and return the
    string found at the end, or None.

    find_value(document, "RequestItem", "RequestType") returns the
    text of RequestItem/RequestType.
    """
    value = _body(document, message_type)
    for name in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(name)
        if isinstance(value, tuple):
            value = value[0] if value else None
    if isinstance(value, str):
        return value
    return None


def _agency_id(agency):
    """An agency may be described by an AgencyId element or be a bare
    string.
    """
    if isinstance(agency, Mapping):
        agency = agency.get("AgencyId")
    if isinstance(agency, tuple):
        agency = agency[0] if agency else None
    if isinstance(agency, str) and agency:
        return agency
    return None


def make_header(document, message_type=None):
    """Build the ResponseHeader for a response to `document`.

    The agencies of the request's InitiationHeader are swapped. A
    LookupVersion request has no InitiationHeader; its FromAgencyId and
    ToAgencyId sit directly in the message. No other message is
    searched outside its InitiationHeader. If either agency is
    missing, there is no header.

    :return: A Header, or None.
    """
    if message_type is None:
        message_type = document.message_type
    body = _body(document, message_type)
    if message_type == LOOKUP_VERSION:
        initiation = body.get("InitiationHeader", body)
    else:
        initiation = body.get("InitiationHeader")
    if not isinstance(initiation, Mapping):
        return None
    from_agency = _agency_id(initiation.get("FromAgencyId"))
    to_agency = _agency_id(initiation.get("ToAgencyId"))
    if from_agency is None or to_agency is None:
        return None
    return Header(FromAgencyId=to_agency, ToAgencyId=from_agency)
