# encoding: utf-8
import json
import logging
import sys

import pytest

from ncip.config import (
    CannotLoadConfiguration,
    Configuration,
    temp_config,
)
from ncip.log import (
    JSONFormatter,
    LogConfiguration,
    Loggly,
    LogglyHandler,
    StringFormatter,
    SysLogger,
)


class TestJSONFormatter(object):

    def test_format(self):
        formatter = JSONFormatter("some app")
        assert "some app" == formatter.app_name

        exc_info = None
        # Cause an exception so we can capture its exc_info()
        try:
            raise ValueError("fake exception")
        except ValueError as e:
            exc_info = sys.exc_info()

        record = logging.LogRecord(
            "some logger", logging.DEBUG, "pathname",
            104, "A message", {}, exc_info, None
        )
        data = json.loads(formatter.format(record))
        assert "some logger" == data['name']
        assert "some app" == data['app']
        assert "DEBUG" == data['level']
        assert "A message" == data['message']
        assert "pathname" == data['filename']
        assert 'ValueError: fake exception' in data['traceback']

    def test_format_with_different_types_of_strings(self):
        # As long as all data is either Unicode or UTF-8, any combination
        # of Unicode and bytestrings can be combined in log messages.
        unicode_message = "An important snowman: %s"
        byte_message = unicode_message.encode("utf8")

        unicode_snowman = "☃"
        utf8_snowman = unicode_snowman.encode("utf8")

        formatter = JSONFormatter("some app")
        for msg, args in (
            (unicode_message, utf8_snowman),
            (unicode_message, unicode_snowman),
            (byte_message, utf8_snowman),
            (byte_message, unicode_snowman),
        ):
            record = logging.LogRecord(
                "some logger", logging.DEBUG, "pathname",
                104, msg, (args,), None, None
            )
            data = json.loads(formatter.format(record))
            assert "An important snowman: ☃" == data['message']

    def test_bad_arguments_are_reported(self):
        formatter = JSONFormatter(None)
        assert LogConfiguration.DEFAULT_APP_NAME == formatter.app_name
        record = logging.LogRecord(
            "some logger", logging.INFO, "pathname", 104,
            "%s and %s", ("just one",), None, None
        )
        data = json.loads(formatter.format(record))
        assert data['message'].startswith("Log message could not be formatted.")


class TestLogConfiguration(object):

    def test_from_configuration_defaults(self):
        # With no configuration, messages go to the console in JSON.
        level, [handler], errors = LogConfiguration.from_configuration(
            {}, testing=False
        )
        assert LogConfiguration.INFO == level
        assert isinstance(handler, logging.StreamHandler)
        assert isinstance(handler.formatter, JSONFormatter)
        assert [] == errors

        # While testing, they're in text.
        level, [handler], errors = LogConfiguration.from_configuration(
            None, testing=True
        )
        assert isinstance(handler.formatter, StringFormatter)

    def test_from_configuration(self):
        config = {
            Configuration.LOG_LEVEL: LogConfiguration.DEBUG,
            Configuration.LOG_FORMAT: SysLogger.TEXT_LOG_FORMAT,
            Configuration.LOG_MESSAGE_TEMPLATE: "%(message)s",
            Configuration.LOG_APP_NAME: "my gateway",
            Configuration.LOGGLY: dict(token="a_token"),
        }
        level, [stream, loggly], errors = LogConfiguration.from_configuration(
            config, testing=False
        )
        assert LogConfiguration.DEBUG == level
        assert "%(message)s" == stream.formatter._fmt
        assert isinstance(loggly, LogglyHandler)
        assert "my gateway" == loggly.formatter.app_name
        assert [] == errors

        # The configuration is ignored while testing.
        level, [stream], errors = LogConfiguration.from_configuration(
            config, testing=True
        )
        assert LogConfiguration.INFO == level

    def test_from_configuration_errors(self):
        config = {
            Configuration.LOG_LEVEL: "LOUD",
            Configuration.LOG_FORMAT: "xml",
            Configuration.LOGGLY: dict(url="http://example.com/"),
        }
        level, handlers, errors = LogConfiguration.from_configuration(
            config, testing=False
        )
        assert LogConfiguration.INFO == level
        assert [] == handlers
        assert [
            "Unknown log level LOUD, using INFO",
            "Error creating logger sysLog Unknown log format: xml",
            "Error creating logger Loggly Loggly integration configured but no token provided.",
        ] == errors

    def test_initialize(self):
        root = logging.getLogger()
        old_handlers = list(root.handlers)
        old_level = root.level
        try:
            with temp_config({Configuration.LOGGING: dict(level="WARN")}):
                level = LogConfiguration.initialize(testing=False)
            assert LogConfiguration.WARN == level
            assert logging.WARN == root.level
            assert 1 == len(
                [x for x in root.handlers if x not in old_handlers]
            )
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
            for handler in old_handlers:
                root.addHandler(handler)
            root.setLevel(old_level)

    def test_syslog_defaults(self):
        assert (
            (SysLogger.JSON_LOG_FORMAT, SysLogger.DEFAULT_MESSAGE_TEMPLATE) ==
            SysLogger._defaults(testing=False)
        )
        assert (
            (SysLogger.TEXT_LOG_FORMAT, SysLogger.DEFAULT_MESSAGE_TEMPLATE) ==
            SysLogger._defaults(testing=True)
        )

    def test_set_formatter(self):
        handler = logging.StreamHandler()
        template = '%(filename)s:%(message)s'
        SysLogger.set_formatter(
            handler,
            log_format=SysLogger.TEXT_LOG_FORMAT,
            message_template=template,
            app_name="some app"
        )
        formatter = handler.formatter
        assert isinstance(formatter, StringFormatter)
        assert template == formatter._fmt

        handler = logging.StreamHandler()
        SysLogger.set_formatter(
            handler, log_format=SysLogger.JSON_LOG_FORMAT, message_template=template
        )
        formatter = handler.formatter
        assert isinstance(formatter, JSONFormatter)
        assert LogConfiguration.DEFAULT_APP_NAME == formatter.app_name

        handler = LogglyHandler("no-such-url")
        Loggly.set_formatter(handler, "some app")
        formatter = handler.formatter
        assert isinstance(formatter, JSONFormatter)
        assert "some app" == formatter.app_name

    def test_loggly_handler(self):
        handler = Loggly.loggly_handler(
            dict(token="a_token", url="http://example.com/%s/")
        )
        assert isinstance(handler, LogglyHandler)
        assert "http://example.com/a_token/" == handler.url

        # Without a URL, the default is used.
        handler = Loggly.loggly_handler(dict(token="a_token"))
        assert Loggly.DEFAULT_LOGGLY_URL % dict(token="a_token") == handler.url

        with pytest.raises(CannotLoadConfiguration) as excinfo:
            Loggly.loggly_handler(dict(token="a_token", url="http://%s/%s"))
        assert "Cannot interpolate token" in str(excinfo.value)

    def test_interpolate_loggly_url(self):
        m = Loggly._interpolate_loggly_url

        # We support two string interpolation techniques for combining
        # a token with a URL.
        assert "http://foo/token/bar/" == m("http://foo/%s/bar/", "token")
        assert "http://foo/token/bar/" == m("http://foo/%(token)s/bar/", "token")

        # If the URL contains no string interpolation, we assume the token's
        # already in there.
        assert "http://foo/othertoken/bar/" == m("http://foo/othertoken/bar/", "token")

        with pytest.raises(TypeError):
            m("http://%s/%s", "token")
        with pytest.raises(KeyError):
            m("http://%(atoken)s/", "token")
