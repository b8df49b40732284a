import logging
import os
import urllib.parse

from flask import (
    Flask,
    request,
)
from flask_babel import Babel

from .config import Configuration
from .log import LogConfiguration


app = Flask(__name__)
app.manager = None
app.config['BABEL_DEFAULT_LOCALE'] = Configuration.localization_languages()[0]
app.config['BABEL_TRANSLATION_DIRECTORIES'] = "../translations"


def get_locale():
    languages = Configuration.localization_languages()
    return request.accept_languages.best_match(languages)

babel = Babel(app, locale_selector=get_locale)


def initialize_logging(testing=None):
    if testing is None:
        testing = 'TESTING' in os.environ
    log_level = LogConfiguration.initialize(testing=testing)
    debug = log_level == LogConfiguration.DEBUG
    app.config['DEBUG'] = debug
    app.debug = debug
    logging.getLogger().info("Application debug mode==%r" % app.debug)
    return log_level

initialize_logging()

from . import routes


def run(url=None):
    base_url = url or 'http://localhost:6500/'
    scheme, netloc, path, parameters, query, fragment = urllib.parse.urlparse(base_url)
    if ':' in netloc:
        host, port = netloc.split(':')
        port = int(port)
    else:
        host = netloc
        port = 80

    logging.info("Starting app on %s:%s", host, port)
    sslContext = 'adhoc' if scheme == 'https' else None
    # One thread, since drivers are not required to be thread-safe.
    app.run(debug=app.debug, host=host, port=port, threaded=False, ssl_context=sslContext)
