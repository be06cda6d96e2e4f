"""Tests for KCCConfig and environment loading."""

from __future__ import annotations

import dataclasses
import logging

import pytest

from kcc_transport import KCCConfig, __version__
from kcc_transport.config import DEFAULT_URI, ENV_VARIABLES


class TestDefaults:
    """Tests for default configuration values."""

    def test_defaults(self):
        """Test the documented defaults."""
        config = KCCConfig()
        assert config.uri == DEFAULT_URI == "http://127.0.0.1:236"
        assert config.http_timeout == 10.0
        assert config.http_max_idle_conns == 100
        assert config.http_max_idle_conns_per_host == 100
        assert config.http_idle_conn_timeout == 90.0
        assert config.http_dial_timeout == 30.0
        assert config.http_keepalive == 120.0
        assert config.http_insecure_skip_verify is False
        assert config.socket_timeout == 30.0
        assert config.session_refresh_interval == 300.0
        assert config.debug is False
        assert config.client_app_name == "kcc-transport"
        assert config.client_app_version == __version__

    def test_frozen(self):
        """Test configurations are immutable."""
        config = KCCConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.uri = "http://other"  # type: ignore[misc]


class TestFromEnv:
    """Tests for KCCConfig.from_env()."""

    def test_empty_environment(self):
        """Test an empty environment yields the defaults."""
        assert KCCConfig.from_env({}) == KCCConfig()

    def test_all_variables(self):
        """Test every documented variable is applied."""
        config = KCCConfig.from_env(
            {
                "KOPANO_SERVER_DEFAULT_URI": "file:///run/kopano/server.sock",
                "KCC_HTTP_TIMEOUT": "5",
                "KCC_HTTP_MAX_IDLE_CONNS": "10",
                "KCC_HTTP_MAX_IDLE_CONNS_PER_HOST": "4",
                "KCC_HTTP_IDLE_CONN_TIMEOUT": "15.5",
                "KCC_HTTP_DIAL_TIMEOUT": "3",
                "KCC_HTTP_KEEPALIVE": "60",
                "KCC_HTTP_INSECURE_SKIP_VERIFY": "yes",
                "KCC_SOCKET_TIMEOUT": "7",
                "KCC_SESSION_REFRESH_INTERVAL": "120",
                "KCC_DEBUG": "on",
            }
        )
        assert config.uri == "file:///run/kopano/server.sock"
        assert config.http_timeout == 5.0
        assert config.http_max_idle_conns == 10
        assert config.http_max_idle_conns_per_host == 4
        assert config.http_idle_conn_timeout == 15.5
        assert config.http_dial_timeout == 3.0
        assert config.http_keepalive == 60.0
        assert config.http_insecure_skip_verify is True
        assert config.socket_timeout == 7.0
        assert config.session_refresh_interval == 120.0
        assert config.debug is True

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("on", True), ("TRUE", True), ("1", True), ("off", False), ("no", False)],
    )
    def test_boolean_switches(self, raw: str, expected: bool):
        """Test accepted spellings of boolean switches."""
        config = KCCConfig.from_env({"KCC_DEBUG": raw})
        assert config.debug is expected

    @pytest.mark.parametrize(
        ("name", "raw"),
        [
            ("KCC_HTTP_TIMEOUT", "soon"),
            ("KCC_HTTP_MAX_IDLE_CONNS", "1.5"),
            ("KCC_DEBUG", "maybe"),
        ],
    )
    def test_invalid_values_ignored(
        self, name: str, raw: str, caplog: pytest.LogCaptureFixture
    ):
        """Test unparsable values keep the default and are logged."""
        with caplog.at_level(logging.WARNING):
            config = KCCConfig.from_env({name: raw})

        assert config == KCCConfig()
        assert name in caplog.text

    def test_every_field_has_variable(self):
        """Test only client identification is not read from the environment."""
        names = {f.name for f in dataclasses.fields(KCCConfig)}
        assert names - set(ENV_VARIABLES) == {"client_app_name", "client_app_version"}
