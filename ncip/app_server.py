"""Implement logic common to the web-facing parts of the gateway."""
import json
import logging
import traceback
from functools import wraps

from flask import make_response
from flask_babel import lazy_gettext as _

from .config import Configuration
from .util.problem_detail import ProblemDetail


def returns_problem_detail(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        v = f(*args, **kwargs)
        if isinstance(v, ProblemDetail):
            return v.response
        return v
    return decorated


class ErrorHandler(object):
    def __init__(self, app, debug=False):
        """Constructor.

        :param app: A flask.app object.
        :param debug: Set this to True to give detailed debugging
           information on errors, even if the site is not configured
           to do so.
        """
        self.app = app
        self.debug = debug

    def handle(self, exception):
        """Something very bad has happened. Notify the client."""
        # By default, when reporting errors, err on the side of
        # terseness, to avoid leaking sensitive information.
        debug = self.app.config['DEBUG'] or self.debug
        tb = traceback.format_exc()

        # By default, the error will be logged at log level ERROR.
        log_method = logging.error

        if hasattr(exception, 'as_problem_detail_document'):
            # This exception can be turned directly into a problem
            # detail document.
            document = exception.as_problem_detail_document(debug)
            if not debug:
                debug_message = None
            elif document.debug_message:
                debug_message = document.debug_message + "\n\n" + tb
            else:
                debug_message = tb
            document = document.with_debug(debug_message)
            if document.status_code and document.status_code < 500:
                # The client sent something we couldn't use. That's
                # worth knowing about, but it isn't a bug.
                log_method = logging.warning
            response = make_response(document.response)
        else:
            # There's no way to turn this exception into a problem
            # document. This is probably indicative of a bug in our
            # software.
            if debug:
                body = tb
            else:
                body = _('An internal error occured')
            response = make_response(str(body), 500, {"Content-Type": "text/plain"})

        log_method("Exception in web app: %s", exception, exc_info=exception)
        return response


class HeartbeatController(object):

    HEALTH_CHECK_TYPE = 'application/vnd.health+json'

    def heartbeat(self, conf_class=None):
        health_check_object = dict(status='pass')

        Conf = conf_class or Configuration
        app_version = Conf.app_version()
        if app_version and app_version != Conf.NO_APP_VERSION_FOUND:
            health_check_object['releaseID'] = app_version
            health_check_object['version'] = app_version.split('-')[0]

        data = json.dumps(health_check_object)
        return make_response(data, 200, {"Content-Type": self.HEALTH_CHECK_TYPE})
