"""Tests for bridge configuration."""

import pytest

from bridge_config import BridgeConfig, ConfigError
from teamup.models import Calendar


class TestFromEnv:
    def test_defaults(self):
        config = BridgeConfig.from_env({"TEAMUP_CAL_KEY_OR_ID_event": "ks1"})

        assert config.calendars == (Calendar(name="event", store_key="ks1"),)
        assert config.lookahead_minutes == 15
        assert config.scan_interval_seconds == 120
        assert config.timezone_name == "Europe/Riga"
        assert config.api_base_url == "https://api.teamup.com"
        assert config.scan_interval_seconds > 0

    def test_missing_keys_are_dropped(self):
        config = BridgeConfig.from_env({
            "TEAMUP_CAL_KEY_OR_ID_birthday": "ks1",
            "TEAMUP_CAL_KEY_OR_ID_event": "",
            "TEAMUP_CAL_KEY_OR_ID_timeoff": "ks3",
        })

        assert config.calendar_names == ["birthday", "timeoff"]

    def test_no_calendars_refuses_to_start(self):
        with pytest.raises(ConfigError):
            BridgeConfig.from_env({"TEAMUP_API_KEY": "token"})

    def test_custom_calendar_names(self):
        config = BridgeConfig.from_env({
            "TEAMUP_CALENDARS": "team, oncall",
            "TEAMUP_CAL_KEY_OR_ID_team": "ks1",
            "TEAMUP_CAL_KEY_OR_ID_oncall": "ks2",
            "TEAMUP_CAL_KEY_OR_ID_birthday": "ignored",
        })

        assert config.calendar_names == ["team", "oncall"]
        assert config.get_calendar("oncall").store_key == "ks2"
        assert config.get_calendar("birthday") is None

    def test_custom_values(self):
        config = BridgeConfig.from_env({
            "TEAMUP_CAL_KEY_OR_ID_event": "ks1",
            "DISCORD_CHANNEL_ID": "123456789",
            "REMINDER_LOOKAHEAD_MIN": "30",
            "REMINDER_SCAN_INTERVAL_SEC": "0",
            "TZ_PREF": "America/New_York",
        })

        assert config.channel_id == 123456789
        assert config.lookahead_minutes == 30
        assert config.scan_interval_seconds == 0
        assert config.timezone.zone == "America/New_York"

    def test_bad_integer(self):
        with pytest.raises(ConfigError, match="REMINDER_LOOKAHEAD_MIN"):
            BridgeConfig.from_env({
                "TEAMUP_CAL_KEY_OR_ID_event": "ks1",
                "REMINDER_LOOKAHEAD_MIN": "soon",
            })

    def test_unknown_timezone(self):
        with pytest.raises(ConfigError, match="Unknown timezone"):
            BridgeConfig.from_env({
                "TEAMUP_CAL_KEY_OR_ID_event": "ks1",
                "TZ_PREF": "Mars/Olympus",
            })
