"""The contract between the gateway and the integrated library systems
(ILSes) it talks to.

A driver for a particular ILS subclasses ILS and publishes, through
services(), the NCIP services it actually supports. Everything it
doesn't publish is answered by DefaultILS, which the gateway holds
alongside the driver.
"""
import importlib
import logging
from abc import ABCMeta, abstractmethod

from ..config import (
    CannotLoadConfiguration,
    Configuration,
)
from ..extractors import make_header
from ..problem import (
    NULL,
    UNSUPPORTED_SERVICE,
    Problem,
)
from ..response import Response

# The NCIP services a driver may implement, by lower-cased message type.
LOOKUP_VERSION = "lookupversion"
LOOKUP_USER = "lookupuser"
CHECK_OUT_ITEM = "checkoutitem"
CHECK_IN_ITEM = "checkinitem"
RENEW_ITEM = "renewitem"
REQUEST_ITEM = "requestitem"
CANCEL_REQUEST_ITEM = "cancelrequestitem"
ACCEPT_ITEM = "acceptitem"

CORE_SERVICES = (
    LOOKUP_VERSION, LOOKUP_USER, CHECK_OUT_ITEM, CHECK_IN_ITEM,
    RENEW_ITEM, REQUEST_ITEM, CANCEL_REQUEST_ITEM, ACCEPT_ITEM,
)

# Services some installations add on top of the core set.
LOOKUP_AGENCY = "lookupagency"
ITEM_SHIPPED = "itemshipped"
ITEM_RECEIVED = "itemreceived"
ITEM_REQUESTED = "itemrequested"

EXTENSION_SERVICES = (
    LOOKUP_AGENCY, ITEM_SHIPPED, ITEM_RECEIVED, ITEM_REQUESTED,
)

SERVICES = CORE_SERVICES + EXTENSION_SERVICES


class ILS(metaclass=ABCMeta):
    """Base class for all ILS drivers."""

    log = logging.getLogger("ILS driver")

    # Drivers available by short name in the configuration file. Any
    # other driver can be named by the dotted path to its class.
    DRIVERS = {
        "mock": "ncip.ils.mock.MockILS",
    }

    @abstractmethod
    def services(self):
        """Return the services this driver supports.

        :return: A dictionary mapping lower-cased NCIP message types
            (e.g. "checkoutitem") to callables. Each callable takes a
            RequestDocument and returns a Response. It must report
            failures as a Problem inside the Response rather than by
            raising an exception.
        """
        raise NotImplementedError()

    @classmethod
    def load(cls, name, **settings):
        """Instantiate the driver with the given name or dotted path.

        :raise CannotLoadConfiguration: If there is no such driver.
        """
        path = cls.DRIVERS.get(name.lower(), name)
        module_name, _, class_name = path.rpartition(".")
        if not module_name:
            raise CannotLoadConfiguration("Unknown ILS driver: %s" % name)
        try:
            module = importlib.import_module(module_name)
            driver_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise CannotLoadConfiguration(
                "Could not load ILS driver %s: %s" % (name, e)
            )
        if not (isinstance(driver_class, type) and issubclass(driver_class, ILS)):
            raise CannotLoadConfiguration(
                "%s is not an ILS driver." % path
            )
        cls.log.info("Using ILS driver %s", path)
        return driver_class(**settings)

    @classmethod
    def from_configuration(cls):
        return cls.load(
            Configuration.ils_driver(), **Configuration.ils_settings()
        )


class DefaultILS(object):
    """Answers the services a driver doesn't support itself.

    LookupVersion is answered for every driver. Every other service is
    answered with an Unsupported Service problem.
    """

    def __init__(self, supported_versions=None):
        if supported_versions is None:
            supported_versions = Configuration.supported_versions()
        if not supported_versions:
            raise CannotLoadConfiguration(
                "At least one supported NCIP version must be configured."
            )
        self.supported_versions = list(supported_versions)

    def handler_for(self, service):
        """Find the method that answers `service`."""
        if service.lower() == LOOKUP_VERSION:
            return self.lookupversion
        return self.unsupported

    def lookupversion(self, document):
        return Response.for_service(
            "LookupVersion", header=make_header(document),
            data=dict(versions=list(self.supported_versions))
        )

    def unsupported(self, document):
        message_type = document.message_type
        problem = Problem(
            UNSUPPORTED_SERVICE,
            "%s service is not supported by this implementation." % (
                message_type
            ),
            message_type, NULL,
        )
        return Response.for_service(
            message_type, header=make_header(document), problem=problem
        )
