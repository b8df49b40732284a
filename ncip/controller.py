import logging

import flask
from flask import Response

from .app_server import HeartbeatController
from .gateway import Gateway
from .problem_details import NO_MESSAGE
from .serializer import ResponseSerializer


class GatewayManager(object):
    """Holds the objects that live as long as the web application:
    the gateway, with its ILS driver, and the controllers that use it.
    """

    log = logging.getLogger("NCIP gateway manager")

    def __init__(self, gateway=None, serializer=None):
        self.gateway = gateway or Gateway.from_configuration()
        self.serializer = serializer or ResponseSerializer()
        self.ncip = NCIPController(self)
        self.heartbeat = HeartbeatController()
        self.log.info(
            "Gateway ready with driver %s",
            self.gateway.driver.__class__.__name__
        )


class NCIPController(object):
    """Accept NCIP messages over HTTP."""

    # The query parameter a GET request carries its message in.
    XML_PARAMETER = "xml"

    def __init__(self, manager):
        self.manager = manager

    def message_from_request(self):
        """Find the NCIP message in the current request.

        POSTed messages are the request body, or the 'xml' field of a
        submitted form. A GET request carries the message in the 'xml'
        query parameter.
        """
        if flask.request.method == "GET":
            return flask.request.args.get(self.XML_PARAMETER)
        if self.XML_PARAMETER in flask.request.form:
            return flask.request.form[self.XML_PARAMETER]
        return flask.request.get_data()

    def process(self):
        """Handle one NCIP message.

        Structural problems with the message are raised as
        GatewayErrors and turned into problem detail documents by the
        application's error handler.
        """
        xml = self.message_from_request()
        if not xml:
            return NO_MESSAGE
        response = self.manager.gateway.process_request(xml)
        body = self.manager.serializer.serialize(response)
        return Response(
            body, 200, {"Content-Type": ResponseSerializer.MEDIA_TYPE}
        )
