import os

import pytest

from ncip.config import (
    CannotLoadConfiguration,
    Configuration,
    empty_config,
    temp_config,
)


class TestConfiguration(object):

    def test_temp_config(self):
        old = Configuration.instance
        with temp_config({"a": 1}) as config:
            assert {"a": 1} == Configuration.instance
            assert config is Configuration.instance
        assert old is Configuration.instance

        with empty_config():
            assert {} == Configuration.instance

    def test_get_and_required(self):
        with temp_config({"a": 1}):
            assert 1 == Configuration.get("a")
            assert "default" == Configuration.get("b", "default")
            assert 1 == Configuration.required("a")
            with pytest.raises(ValueError) as excinfo:
                Configuration.required("b")
            assert "Required configuration variable b was not defined!" in str(excinfo.value)

        with temp_config(None):
            Configuration.instance = None
            with pytest.raises(ValueError):
                Configuration.get("a")

    def test_integration(self):
        with temp_config({"ils": dict(driver="mock")}):
            assert dict(driver="mock") == Configuration.integration("ils")
            assert {} == Configuration.integration("logging")
            with pytest.raises(ValueError):
                Configuration.integration("logging", required=True)

    def test_ils(self):
        with empty_config():
            assert "mock" == Configuration.ils_driver()
            assert {} == Configuration.ils_settings()

        config = {
            "ils": dict(driver="my.ils.Driver", settings=dict(url="http://ils/"))
        }
        with temp_config(config):
            assert "my.ils.Driver" == Configuration.ils_driver()
            assert dict(url="http://ils/") == Configuration.ils_settings()

    def test_supported_versions(self):
        with empty_config():
            versions = Configuration.supported_versions()
            assert Configuration.DEFAULT_SUPPORTED_VERSIONS == versions
            # It's a copy.
            versions.append("nonsense")
            assert "nonsense" not in Configuration.DEFAULT_SUPPORTED_VERSIONS

        with temp_config({"supported_versions": ["2.02"]}):
            assert ["2.02"] == Configuration.supported_versions()

        with temp_config({"supported_versions": "2.02"}):
            with pytest.raises(CannotLoadConfiguration):
                Configuration.supported_versions()

    def test_validation_schema(self):
        with empty_config():
            assert None == Configuration.validation_schema()
        with temp_config({"validation": dict(schema="/etc/ncip.xsd")}):
            assert "/etc/ncip.xsd" == Configuration.validation_schema()

    def test_localization_languages(self):
        with empty_config():
            assert ["en"] == Configuration.localization_languages()
        with temp_config({"localization_languages": ["fr", "en"]}):
            assert ["fr", "en"] == Configuration.localization_languages()

    def test_app_version(self):
        with temp_config({Configuration.APP_VERSION: "1.2.3-abc"}):
            assert "1.2.3-abc" == Configuration.app_version()
        with temp_config(None):
            Configuration.instance = None
            assert Configuration.NO_APP_VERSION_FOUND == Configuration.app_version()

    def test_load_ignores_comments(self):
        config = Configuration._load(
            '# A comment\n{\n  // another comment\n  "ils": {"driver": "mock"}\n}'
        )
        assert dict(ils=dict(driver="mock")) == config

    def test_load_from_file(self, tmp_path, monkeypatch):
        variable = Configuration.CONFIGURATION_FILE_ENVIRONMENT_VARIABLE

        monkeypatch.delenv(variable, raising=False)
        assert {} == Configuration.load_from_file()

        path = tmp_path / "config.json"
        path.write_text('{"supported_versions": ["2.02"]}')
        monkeypatch.setenv(variable, str(path))
        assert dict(supported_versions=["2.02"]) == Configuration.load_from_file()

        with temp_config():
            Configuration.load()
            assert ["2.02"] == Configuration.supported_versions()

        path.write_text('{"supported_versions": ')
        with pytest.raises(CannotLoadConfiguration) as excinfo:
            Configuration.load_from_file()
        assert "Error loading configuration file" in str(excinfo.value)

        monkeypatch.setenv(variable, os.path.join(str(tmp_path), "missing.json"))
        with pytest.raises(CannotLoadConfiguration):
            Configuration.load_from_file()
