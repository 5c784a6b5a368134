"""Unit tests for v4l2-ctl text parsers."""

import pytest

from v4lsaver.core.gateway import (
    DeviceGateway,
    parse_control_line,
    parse_controls,
    parse_device_info,
)


class TestParseDeviceInfo:
    """Test parsing of --info output."""

    def test_all_fields(self, fake_gateway):
        fake_gateway.add_device("/dev/video0", serial="8A3F21C0", card="HD Pro Webcam C920")

        info = parse_device_info("/dev/video0", fake_gateway.query_info("/dev/video0"))

        assert info.path == "/dev/video0"
        assert info.serial == "8A3F21C0"
        assert info.card_type == "HD Pro Webcam C920"
        assert info.vendor == "usb-0000:00:14.0-1"

    def test_missing_fields_are_none(self):
        info = parse_device_info("/dev/video3", "Driver Info:\n\tDriver name : bcm2835-isp\n")

        assert info.serial is None
        assert info.card_type is None
        assert info.vendor is None

    def test_keys_are_case_insensitive(self):
        text = "CARD TYPE : Cam\nVENDOR : Acme\nserial : 42\n"
        info = parse_device_info("/dev/video0", text)

        assert (info.card_type, info.vendor, info.serial) == ("Cam", "Acme", "42")

    def test_first_bus_info_wins(self):
        text = "\tBus info : usb-1\n\tBus info : usb-2\n"
        assert parse_device_info("/dev/video0", text).vendor == "usb-1"

    def test_empty_value_is_none(self):
        assert parse_device_info("/dev/video0", "\tSerial           : \n").serial is None


class TestParseControlLine:
    """Test parsing of single control-dump lines."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            (
                "                     brightness 0x00980900 (int)    : "
                "min=-64 max=64 step=1 default=0 value=-12",
                ("brightness", "int", "-12"),
            ),
            (
                "           power_line_frequency 0x00980918 (menu)   : "
                "min=0 max=2 default=1 value=2 (60 Hz)",
                ("power_line_frequency", "menu", "2"),
            ),
            (
                "         exposure_time_absolute 0x009a0902 (int)    : "
                "min=3 max=2047 step=1 default=250 value=250 flags=inactive",
                ("exposure_time_absolute", "int", "250"),
            ),
            ("    sharpness (int) 3 # legacy", ("sharpness", "int", "3")),
            ("focus_automatic_continuous (bool) on", ("focus_automatic_continuous", "bool", "on")),
        ],
    )
    def test_parses_value(self, line, expected):
        assert parse_control_line(line) == expected

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "User Controls",
            "\t\t\t\t1: 50 Hz",
            "\tVideo input : 0 (Camera 1: ok)",
            "    brightness (int)",
        ],
    )
    def test_rejects_non_control_lines(self, line):
        assert parse_control_line(line) is None


class TestParseControls:
    """Test parsing of whole control dumps."""

    def test_full_dump(self, controls_dump):
        controls = parse_controls(controls_dump)

        assert controls["brightness"] == ("int", "140")
        assert controls["white_balance_automatic"] == ("bool", "0")
        assert controls["power_line_frequency"] == ("menu", "1")
        assert controls["exposure_time_absolute"] == ("int", "-5")
        assert "low_light_compensation" in controls
        assert "Disabled" not in controls

    def test_first_occurrence_wins(self):
        text = "gain (int) 5\ngain (int) 9\n"
        assert parse_controls(text) == {"gain": ("int", "5")}


def test_fake_gateway_satisfies_protocol(fake_gateway):
    assert isinstance(fake_gateway, DeviceGateway)
