import datetime
import json
import logging
import socket

from loggly.handlers import HTTPSHandler as LogglyHandler

from .config import (
    CannotLoadConfiguration,
    Configuration,
)


class JSONFormatter(logging.Formatter):
    hostname = socket.gethostname()
    fqdn = socket.getfqdn()
    if len(fqdn) > len(hostname):
        hostname = fqdn

    def __init__(self, app_name):
        super(JSONFormatter, self).__init__()
        self.app_name = app_name or LogConfiguration.DEFAULT_APP_NAME

    def format(self, record):
        def only_native_strings(s):
            """Convert any kind of string-like object to the native string
            implementation. Leave everything else alone.
            """
            if isinstance(s, bytes):
                s = s.decode("utf-8")
            return s
        message = only_native_strings(record.msg)

        if record.args:
            record_args = tuple(
                [only_native_strings(arg) for arg in record.args]
            )
            try:
                message = message % record_args
            except Exception as e:
                # A problem with the logging code shouldn't break the
                # code that actually does the work, but it has to be
                # reported so it can be fixed.
                message = "Log message could not be formatted. Exception: %r. Original message: message=%r args=%r" % (
                    e, message, record_args
                )
        data = dict(
            host=self.hostname,
            app=self.app_name,
            name=record.name,
            level=record.levelname,
            filename=record.filename,
            message=message,
            timestamp=datetime.datetime.utcnow().isoformat()
        )
        if record.exc_info:
            data['traceback'] = self.formatException(record.exc_info)
        return json.dumps(data)


class StringFormatter(logging.Formatter):
    """Encode all output as a string.
    """
    def format(self, record):
        data = super(StringFormatter, self).format(record)
        return str(data)


class Logger(object):
    """Abstract base class for logging"""

    DEFAULT_APP_NAME = 'ncip-gateway'

    JSON_LOG_FORMAT = 'json'
    TEXT_LOG_FORMAT = 'text'
    DEFAULT_MESSAGE_TEMPLATE = "%(asctime)s:%(name)s:%(levelname)s:%(filename)s:%(message)s"

    @classmethod
    def set_formatter(cls, handler, app_name=None, log_format=None, message_template=None):
        """Tell the given `handler` to format its log messages in a
        certain way.
        """
        # Initialize defaults
        if log_format is None:
            log_format = cls.JSON_LOG_FORMAT
        if message_template is None:
            message_template = cls.DEFAULT_MESSAGE_TEMPLATE

        if log_format == cls.JSON_LOG_FORMAT:
            formatter = JSONFormatter(app_name)
        else:
            formatter = StringFormatter(message_template)
        handler.setFormatter(formatter)

    @classmethod
    def from_configuration(cls, config, testing=False):
        """Should be implemented in each logging class."""
        raise NotImplementedError()


class SysLogger(Logger):

    NAME = 'sysLog'

    @classmethod
    def _defaults(cls, testing=False):
        """Return default log configuration values."""
        if testing:
            internal_log_format = cls.TEXT_LOG_FORMAT
        else:
            internal_log_format = cls.JSON_LOG_FORMAT
        message_template = cls.DEFAULT_MESSAGE_TEMPLATE
        return internal_log_format, message_template

    @classmethod
    def from_configuration(cls, config, testing=False):
        (internal_log_format, message_template) = cls._defaults(testing)
        app_name = cls.DEFAULT_APP_NAME

        if config and not testing:
            internal_log_format = (
                config.get(Configuration.LOG_FORMAT) or internal_log_format
            )
            message_template = (
                config.get(Configuration.LOG_MESSAGE_TEMPLATE)
                or message_template
            )
            app_name = config.get(Configuration.LOG_APP_NAME) or app_name

        if internal_log_format not in (cls.JSON_LOG_FORMAT, cls.TEXT_LOG_FORMAT):
            raise CannotLoadConfiguration(
                "Unknown log format: %s" % internal_log_format
            )

        handler = logging.StreamHandler()
        cls.set_formatter(handler, log_format=internal_log_format, message_template=message_template, app_name=app_name)
        return handler


class Loggly(Logger):

    NAME = "Loggly"
    DEFAULT_LOGGLY_URL = "https://logs-01.loggly.com/inputs/%(token)s/tag/python/"

    TOKEN = 'token'
    URL = 'url'

    @classmethod
    def from_configuration(cls, config, testing=False):
        loggly = None
        settings = None

        app_name = cls.DEFAULT_APP_NAME
        if config and not testing:
            settings = config.get(Configuration.LOGGLY)
            app_name = config.get(Configuration.LOG_APP_NAME) or app_name

        if settings:
            loggly = cls.loggly_handler(settings)
            cls.set_formatter(loggly, app_name)

        return loggly

    @classmethod
    def loggly_handler(cls, settings):
        """Turn the Loggly section of the logging configuration into a
        log handler.
        """
        token = settings.get(cls.TOKEN)
        url = settings.get(cls.URL) or cls.DEFAULT_LOGGLY_URL
        if not token:
            raise CannotLoadConfiguration(
                "Loggly integration configured but no token provided."
            )
        try:
            url = cls._interpolate_loggly_url(url, token)
        except (TypeError, KeyError):
            raise CannotLoadConfiguration(
                "Cannot interpolate token %s into loggly URL %s" % (
                    token, url,
                )
            )
        return LogglyHandler(url)

    @classmethod
    def _interpolate_loggly_url(cls, url, token):
        if '%s' in url:
            return url % token
        if '%(' in url:
            return url % dict(token=token)

        # Assume the token is already in the URL.
        return url

    @classmethod
    def set_formatter(cls, handler, app_name):
        """Tell the given `handler` to format its log messages in a
        certain way.
        """
        formatter = JSONFormatter(app_name)
        handler.setFormatter(formatter)


class LogConfiguration(object):
    """Configures the active Python logging handlers based on the
    'logging' section of the configuration file.
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    # The default value to put into the 'app' field of JSON-format logs,
    # unless the configuration overrides it.
    DEFAULT_APP_NAME = Logger.DEFAULT_APP_NAME

    DEFAULT_LOG_LEVEL = INFO

    # Loggers for verbose libraries, which never log below this level.
    VERBOSE_LIBRARY_LOG_LEVEL = WARN

    LOGGERS = [SysLogger, Loggly]

    @classmethod
    def initialize(cls, config=None, testing=False):
        """Make the logging handlers reflect the current logging rules.

        :param config: The 'logging' section of the configuration. If
            this is None, it is taken from the active Configuration.

        :param testing: True if unit tests are currently running; otherwise False.
        """
        if config is None:
            config = Configuration.integration(Configuration.LOGGING)
        log_level, new_handlers, errors = cls.from_configuration(
            config, testing
        )

        # Replace the set of handlers associated with the root logger.
        logger = logging.getLogger()
        logger.setLevel(log_level)
        old_handlers = list(logger.handlers)
        for handler in new_handlers:
            logger.addHandler(handler)
            handler.setLevel(log_level)
        for handler in old_handlers:
            logger.removeHandler(handler)

        # These loggers can cause infinite loops if they're set to
        # DEBUG, because their log is triggered during the process of
        # logging something to Loggly.
        for logger in ['urllib3.connectionpool', 'requests.packages.urllib3.connectionpool']:
            logging.getLogger(logger).setLevel(cls.VERBOSE_LIBRARY_LOG_LEVEL)

        # If we had an error creating any log handlers report it
        for error in errors:
            logging.getLogger().error(error)

        return log_level

    @classmethod
    def from_configuration(cls, config, testing=False):
        """Return the logging policy described by the configuration.

        :param config: The 'logging' section of the configuration
            file, or None for the default policy.

        :param testing: A boolean indicating whether a unit test is
            happening right now. If True, the configuration will be
            ignored in favor of a known test-friendly policy.

        :return: A 3-tuple (log_level, handlers, errors). `handlers`
            is a list of Handler objects that will be associated with
            the top-level logger. `errors` is a list of messages
            describing handlers that could not be created.
        """
        handlers = []
        errors = []

        log_level = cls.DEFAULT_LOG_LEVEL
        if config and not testing:
            log_level = config.get(Configuration.LOG_LEVEL) or log_level
        if log_level not in (cls.DEBUG, cls.INFO, cls.WARN, cls.ERROR):
            errors.append("Unknown log level %s, using %s" % (
                log_level, cls.DEFAULT_LOG_LEVEL
            ))
            log_level = cls.DEFAULT_LOG_LEVEL

        for logger in cls.LOGGERS:
            try:
                handler = logger.from_configuration(config, testing)
                if handler:
                    handlers.append(handler)
            except Exception as e:
                errors.append(
                    "Error creating logger %s %s" % (logger.NAME, str(e))
                )

        return log_level, handlers, errors
