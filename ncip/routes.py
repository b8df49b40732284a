import logging
import os

from werkzeug.exceptions import HTTPException

from .app import app
from .app_server import (
    ErrorHandler,
    returns_problem_detail,
)
from .controller import GatewayManager


@app.before_request
def initialize_gateway_manager():
    if os.environ.get('AUTOINITIALIZE') == "False":
        # It's the responsibility of the importing code to set app.manager
        # appropriately.
        return
    if getattr(app, 'manager', None) is None:
        try:
            app.manager = GatewayManager()
        except Exception:
            logging.exception(
                "Error instantiating gateway manager!"
            )
            raise


h = ErrorHandler(app, app.config['DEBUG'])
@app.errorhandler(Exception)
def exception_handler(exception):
    if isinstance(exception, HTTPException):
        # This isn't an exception we need to handle, it's werkzeug's way
        # of interrupting normal control flow with a specific HTTP response.
        # Return the exception and it will be used as the response.
        return exception
    return h.handle(exception)


@app.route('/', methods=['GET', 'POST'])
@returns_problem_detail
def ncip():
    return app.manager.ncip.process()


@app.route('/heartbeat')
def heartbeat():
    return app.manager.heartbeat.heartbeat()
