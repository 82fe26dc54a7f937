"""Tests for ahatconfig.config.loader"""

import logging
from dataclasses import dataclass
from pathlib import Path

import pytest

import ahatconfig.config.loader as loader_module
from ahatconfig.config import ConfigLoader, load_config, setting
from ahatconfig.exceptions import CoercionError, ConfigurationError, FileDecodeError, MissingRequiredFieldError
from sample_config import FULL_TOML, AppConfig, RateLimit, User

SERVER_TOML = """
[server]
host = "localhost"
port = 8000

[database]
user = "testuser"
"""


class TestHybridMode:
    """Tests for file plus environment loading"""

    def test_file_only(self, write_toml, recorder):
        directory = write_toml("testapp", SERVER_TOML)
        config = load_config(AppConfig, "testapp", directory, environ={}, logger=recorder)
        assert config.server.host == "localhost"
        assert config.server.port == 8000

    def test_environment_overrides_file(self, write_toml, recorder):
        directory = write_toml("app", SERVER_TOML)
        config = load_config(
            AppConfig, "app", directory, environ={"APP_SERVER_HOST": "override"}, logger=recorder
        )
        assert config.server.host == "override"
        assert config.server.port == 8000

    def test_full_document_with_list_override(self, write_toml, recorder):
        directory = write_toml("testapp", FULL_TOML)
        config = load_config(
            AppConfig,
            "testapp",
            directory,
            environ={"TESTAPP_USERS_0_NAME": "Carol"},
            logger=recorder,
        )
        assert config.users == [User(name="Carol", role="user")]
        assert config.database.hosts == ["db1.example.com", "db2.example.com"]

    def test_default_fills_field_missing_from_file(self, write_toml, recorder):
        directory = write_toml("testapp", '[server]\nhost = "h"\n[database]\nuser = "u"\n')
        config = load_config(AppConfig, "testapp", directory, environ={}, logger=recorder)
        assert config.server.port == 8080

    def test_required_missing_from_both(self, write_toml, recorder):
        directory = write_toml("testapp", '[server]\nhost = "h"\n')
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            load_config(AppConfig, "testapp", directory, environ={}, logger=recorder)
        assert "USER" in str(exc_info.value)
        assert "Config load failed" in recorder.messages("ERROR")

    def test_required_satisfied_by_environment(self, write_toml, recorder):
        directory = write_toml("testapp", '[server]\nhost = "h"\n')
        config = load_config(
            AppConfig, "testapp", directory, environ={"TESTAPP_DATABASE_USER": "envuser"}, logger=recorder
        )
        assert config.database.user == "envuser"

    def test_no_file_environment_only_values(self, tmp_path: Path, recorder):
        config = load_config(
            AppConfig,
            "testapp",
            tmp_path,
            environ={"TESTAPP_SERVER_HOST": "h", "TESTAPP_DATABASE_USER": "u"},
            logger=recorder,
        )
        assert config.server.host == "h"
        assert config.server.port == 8080

    def test_decode_error_is_fatal(self, write_toml, recorder):
        directory = write_toml("testapp", "not toml at all [")
        with pytest.raises(FileDecodeError):
            load_config(AppConfig, "testapp", directory, environ={}, logger=recorder)

    def test_coercion_error_is_fatal(self, write_toml, recorder):
        directory = write_toml("testapp", SERVER_TOML)
        with pytest.raises(CoercionError):
            load_config(
                AppConfig, "testapp", directory, environ={"TESTAPP_ENABLED": "maybe"}, logger=recorder
            )


class TestEnvironmentOnlyMode:
    """Tests for <APP>_CONFIG_TYPE=env"""

    def test_file_skipped(self, write_toml, recorder):
        directory = write_toml("testapp", SERVER_TOML)
        config = load_config(
            AppConfig,
            "TESTAPP",
            directory,
            environ={
                "TESTAPP_CONFIG_TYPE": "env",
                "TESTAPP_SERVER_HOST": "envhost",
                "TESTAPP_DATABASE_USER": "envuser",
            },
            logger=recorder,
        )
        assert config.server.host == "envhost"
        assert config.server.port == 8080

    def test_full_environment(self, recorder):
        environ = {
            "TESTAPP_CONFIG_TYPE": "env",
            "TESTAPP_SERVER_HOST": "envhost",
            "TESTAPP_SERVER_PORT": "9090",
            "TESTAPP_DATABASE_USER": "envuser",
            "TESTAPP_DATABASE_PASSWORD": "envpass",
            "TESTAPP_DATABASE_HOSTS": "envdb1,envdb2",
            "TESTAPP_ENABLED": "true",
            "TESTAPP_USERS_0_NAME": "EnvAlice",
            "TESTAPP_USERS_0_ROLE": "env_admin",
            "TESTAPP_USERS_1_NAME": "EnvBob",
            "TESTAPP_USERS_1_ROLE": "env_user",
        }
        config = load_config(AppConfig, "TESTAPP", environ=environ, logger=recorder)

        assert config.server.port == 9090
        assert config.database.hosts == ["envdb1", "envdb2"]
        assert config.users == [User(name="EnvAlice", role="env_admin"), User(name="EnvBob", role="env_user")]
        assert config.enabled is True

    def test_required_missing(self, recorder):
        environ = {
            "TESTAPP_CONFIG_TYPE": "env",
            "TESTAPP_SERVER_PORT": "9090",
            "TESTAPP_DATABASE_USER": "envuser",
        }
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            load_config(AppConfig, "TESTAPP", environ=environ, logger=recorder)
        assert "required field 'HOST' is missing or empty" in str(exc_info.value)

    def test_selector_case_insensitive(self, write_toml, recorder):
        directory = write_toml("testapp", SERVER_TOML)
        with pytest.raises(MissingRequiredFieldError):
            load_config(
                AppConfig, "testapp", directory, environ={"TESTAPP_CONFIG_TYPE": " ENV "}, logger=recorder
            )

    def test_other_selector_values_use_file(self, write_toml, recorder):
        directory = write_toml("testapp", SERVER_TOML)
        config = load_config(
            AppConfig, "testapp", directory, environ={"TESTAPP_CONFIG_TYPE": "file"}, logger=recorder
        )
        assert config.server.host == "localhost"


class TestConfigLoader:
    """Tests for the ConfigLoader object"""

    def test_prefix_normalized(self, recorder):
        loader = ConfigLoader("my-app", logger=recorder)
        assert loader.env_prefix == "MY_APP"
        assert loader.config_type_key == "MY_APP_CONFIG_TYPE"

    def test_empty_app_name_rejected(self):
        with pytest.raises(ValueError):
            ConfigLoader("")

    def test_non_record_type(self, tmp_path: Path, recorder):
        with pytest.raises(ConfigurationError):
            ConfigLoader("app", tmp_path, environ={}, logger=recorder).load(dict)

    def test_process_environment_used_by_default(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, recorder
    ):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PROCAPP_SERVER_HOST", "fromproc")
        monkeypatch.setenv("PROCAPP_DATABASE_USER", "u")
        config = ConfigLoader("procapp", tmp_path, logger=recorder).load(AppConfig)
        assert config.server.host == "fromproc"

    def test_env_file_merged_under_process_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, recorder
    ):
        env_file = tmp_path / "custom.env"
        env_file.write_text("DOTAPP_SERVER_HOST=fromdotenv\nDOTAPP_DATABASE_USER=dotuser\n")
        monkeypatch.setenv("DOTAPP_DATABASE_USER", "procuser")
        config = ConfigLoader("dotapp", tmp_path, env_file=env_file, logger=recorder).load(AppConfig)
        assert config.server.host == "fromdotenv"
        assert config.database.user == "procuser"

    def test_logs_override_count(self, tmp_path: Path, recorder):
        load_config(
            AppConfig,
            "app",
            tmp_path,
            environ={"APP_SERVER_HOST": "h", "APP_DATABASE_USER": "u"},
            logger=recorder,
        )
        infos = [kwargs for level, message, kwargs in recorder.records if message == "Environment overrides applied"]
        assert infos == [{"app": "app", "overrides": 2}]

    def test_secrets_never_logged(self, tmp_path: Path, recorder):
        load_config(
            AppConfig,
            "app",
            tmp_path,
            environ={"APP_SERVER_HOST": "h", "APP_DATABASE_USER": "u", "APP_DATABASE_PASSWORD": "hunter2"},
            logger=recorder,
        )
        assert "hunter2" not in repr(recorder.records)


class TestEnvironmentLayering:
    """Tests for the mapping the environment pass reads"""

    def test_env_file_sits_under_injected_environ(self, tmp_path: Path, recorder):
        env_file = tmp_path / "custom.env"
        env_file.write_text("LAYAPP_SERVER_HOST=fromdotenv\nLAYAPP_DATABASE_USER=dotuser\n")
        config = load_config(
            AppConfig,
            "layapp",
            tmp_path,
            environ={"LAYAPP_DATABASE_USER": "injected"},
            env_file=env_file,
            logger=recorder,
        )
        assert config.server.host == "fromdotenv"
        assert config.database.user == "injected"


class TestDefaultLogger:
    """Tests for loaders built without an injected logger"""

    def test_repeated_loads_keep_one_log_file_open(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("AHATCONFIG_LOG_FILE", str(tmp_path / "ahatconfig.log"))
        monkeypatch.setattr(loader_module, "_default_logger", None)
        package_logger = logging.getLogger("ahatconfig")
        try:
            for _ in range(5):
                load_config(RateLimit, "leakapp", tmp_path, environ={})
            file_handlers = [h for h in package_logger.handlers if isinstance(h, logging.FileHandler)]
            assert len(file_handlers) == 1
            assert file_handlers[0].stream is not None
        finally:
            for handler in list(package_logger.handlers):
                package_logger.removeHandler(handler)
                handler.close()

    def test_loaders_share_the_package_logger(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(loader_module, "_default_logger", None)
        first = ConfigLoader("one")
        second = ConfigLoader("two")
        assert first.logger is second.logger


class TestLocalRecordTypes:
    """Tests for record types declared inside a function body"""

    def test_localns_resolves_string_annotations(self, tmp_path: Path, recorder):
        @dataclass
        class Inner:
            name: str = setting(env="NAME")

        @dataclass
        class Outer:
            inner: "Inner" = setting(env="INNER")

        config = load_config(
            Outer,
            "localapp",
            tmp_path,
            environ={"LOCALAPP_INNER_NAME": "y"},
            logger=recorder,
            localns={"Inner": Inner},
        )
        assert config.inner == Inner(name="y")
