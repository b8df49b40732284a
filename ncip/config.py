import contextlib
import copy
import json
import logging
import os

# It's convenient for other modules import IntegrationException
# from this module, alongside CannotLoadConfiguration.
from .exceptions import IntegrationException


class CannotLoadConfiguration(IntegrationException):
    """The current configuration of the gateway, or of the ILS driver
    it talks to, is in an incomplete or inconsistent state.

    This is more specific than a base IntegrationException because it
    assumes the problem is evident just by looking at the current
    configuration, with no need to actually talk to the ILS.
    """
    pass


@contextlib.contextmanager
def temp_config(new_config=None, replacement_classes=None):
    old_config = Configuration.instance
    replacement_classes = replacement_classes or [Configuration]
    if new_config is None:
        new_config = copy.deepcopy(old_config)
    try:
        for c in replacement_classes:
            c.instance = new_config
        yield new_config
    finally:
        for c in replacement_classes:
            c.instance = old_config

@contextlib.contextmanager
def empty_config(replacement_classes=None):
    with temp_config({}, replacement_classes) as i:
        yield i


class Configuration(object):

    log = logging.getLogger("Configuration file loader")

    # This is a dictionary containing information loaded from the
    # configuration file. It will be populated immediately after
    # this class is defined.
    instance = None

    # The environment variable naming the configuration file.
    CONFIGURATION_FILE_ENVIRONMENT_VARIABLE = 'NCIP_CONFIGURATION_FILE'

    # The version of the app.
    APP_VERSION = 'app_version'
    VERSION_FILENAME = '.version'
    NO_APP_VERSION_FOUND = object()

    # Logging
    LOGGING = "logging"
    LOG_LEVEL = "level"
    LOG_FORMAT = "format"
    LOG_MESSAGE_TEMPLATE = "message_template"
    LOG_APP_NAME = "app_name"
    LOGGLY = "loggly"

    # The ILS driver and its settings.
    ILS = "ils"
    DRIVER = "driver"
    SETTINGS = "settings"
    DEFAULT_DRIVER = "mock"

    # The NCIP versions this installation claims to support, as
    # reported in a LookupVersionResponse.
    SUPPORTED_VERSIONS = "supported_versions"
    DEFAULT_SUPPORTED_VERSIONS = [
        "http://www.niso.org/schemas/ncip/v2_0/imp1/xsd/ncip_v2_0.xsd",
        "http://www.niso.org/schemas/ncip/v2_02/ncip_v2_02.xsd",
    ]

    # Incoming message validation.
    VALIDATION = "validation"
    SCHEMA = "schema"

    LOCALIZATION_LANGUAGES = "localization_languages"
    DEFAULT_LOCALIZATION_LANGUAGES = ["en"]

    # General getters

    @classmethod
    def get(cls, key, default=None):
        if cls.instance is None:
            raise ValueError("No configuration object loaded!")
        return cls.instance.get(key, default)

    @classmethod
    def required(cls, key):
        value = cls.get(key)
        if value is not None:
            return value
        raise ValueError(
            "Required configuration variable %s was not defined!" % key
        )

    @classmethod
    def integration(cls, name, required=False):
        """Find the configuration of a top-level integration such as
        the ILS driver or logging.
        """
        v = cls.get(name, {})
        if not v and required:
            raise ValueError(
                "Required integration '%s' was not defined! I see: %r" % (
                    name, ", ".join(sorted((cls.instance or {}).keys()))
                )
            )
        return v

    @classmethod
    def ils_driver(cls):
        """The name or dotted path of the configured ILS driver."""
        return cls.integration(cls.ILS).get(cls.DRIVER) or cls.DEFAULT_DRIVER

    @classmethod
    def ils_settings(cls):
        """Driver-specific settings, passed to the driver's constructor."""
        return cls.integration(cls.ILS).get(cls.SETTINGS) or {}

    @classmethod
    def supported_versions(cls):
        versions = cls.get(cls.SUPPORTED_VERSIONS)
        if not versions:
            return list(cls.DEFAULT_SUPPORTED_VERSIONS)
        if isinstance(versions, str):
            raise CannotLoadConfiguration(
                "%s must be a list of version identifiers, not %r" % (
                    cls.SUPPORTED_VERSIONS, versions
                )
            )
        return list(versions)

    @classmethod
    def validation_schema(cls):
        """The path to an XML Schema that incoming messages must
        validate against, or None.
        """
        return cls.integration(cls.VALIDATION).get(cls.SCHEMA)

    @classmethod
    def localization_languages(cls):
        return (
            cls.get(cls.LOCALIZATION_LANGUAGES)
            or cls.DEFAULT_LOCALIZATION_LANGUAGES
        )

    @classmethod
    def app_version(cls):
        """Returns the git version of the app, if a .version file exists."""
        if cls.instance is None:
            return cls.NO_APP_VERSION_FOUND
        version = cls.get(cls.APP_VERSION, None)
        if version:
            # The version has been set in Configuration before.
            return version

        root_dir = os.path.join(os.path.split(__file__)[0], "..")
        version_file = os.path.join(root_dir, cls.VERSION_FILENAME)

        version = cls.NO_APP_VERSION_FOUND
        if os.path.exists(version_file):
            with open(version_file) as f:
                version = f.readline().strip() or version

        cls.instance[cls.APP_VERSION] = version
        return version

    @classmethod
    def load(cls):
        """Load the configuration file and make it the active
        configuration.
        """
        cls.instance = cls.load_from_file()
        return cls.instance

    @classmethod
    def load_from_file(cls):
        """Load site configuration from a config file."""
        cfv = cls.CONFIGURATION_FILE_ENVIRONMENT_VARIABLE
        config_path = os.environ.get(cfv)
        if config_path:
            try:
                cls.log.info("Loading configuration from %s", config_path)
                with open(config_path) as f:
                    configuration = cls._load(f.read())
            except Exception as e:
                raise CannotLoadConfiguration(
                    "Error loading configuration file %s: %s" % (
                        config_path, e)
                )
        else:
            configuration = cls._load('{}')

        return configuration

    @classmethod
    def _load(cls, str):
        lines = [x for x in str.split("\n")
                 if not (x.strip().startswith("#") or x.strip().startswith("//"))]
        return json.loads("\n".join(lines))

# Immediately load the configuration file (if any).
Configuration.instance = Configuration.load_from_file()
