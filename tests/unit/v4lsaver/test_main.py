"""Unit tests for the command-line entry point."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from v4lsaver import __main__ as cli
from v4lsaver.core.capture import DeviceManager


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Restore root logger handlers and level after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def wired_cli(fake_gateway, dev_dir):
    """Point the CLI at the fake gateway and fake /dev."""

    def _device_manager(gateway):
        return DeviceManager(fake_gateway, dev_dir=dev_dir)

    with patch.object(cli, "check_dependencies"), patch.object(
        cli, "DeviceManager", side_effect=_device_manager
    ):
        yield


class TestNormalizeArgv:
    """Test legacy flag translation."""

    @pytest.mark.parametrize(
        "argv,expected",
        [
            (["--save"], ["save"]),
            (["--load", "1234ABCD"], ["load", "1234ABCD"]),
            (["--json"], ["list-json"]),
            (["--log-level", "DEBUG", "--list"], ["--log-level", "DEBUG", "list"]),
            (["save", "/dev/video0"], ["save", "/dev/video0"]),
        ],
    )
    def test_normalize(self, argv, expected):
        assert cli.normalize_argv(argv) == expected


class TestMain:
    """Test suite for main()."""

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == os.EX_OK
        assert "list-json" in capsys.readouterr().out

    def test_help_command(self, capsys):
        assert cli.main(["help"]) == os.EX_OK
        assert "Serial number" in capsys.readouterr().out

    def test_missing_v4l2_ctl(self, tmp_path, capsys):
        code = cli.main(["--v4l2-ctl", str(tmp_path / "no-such-v4l2-ctl"), "list"])

        assert code == os.EX_UNAVAILABLE
        err = capsys.readouterr().err
        assert "Missing required dependencies" in err
        assert "v4l-utils" in err

    def test_list_json(self, wired_cli, add_device, metadata_formats, capsys):
        add_device(0, serial="SN0")
        add_device(1, formats=metadata_formats, serial=None)

        assert cli.main(["list-json"]) == os.EX_OK

        document = json.loads(capsys.readouterr().out)
        assert [d["usable"] for d in document["devices"]] == [True, False]
        assert document["devices"][0]["serial"] == "SN0"

    def test_legacy_json_flag(self, wired_cli, add_device, capsys):
        add_device(0)

        assert cli.main(["--json"]) == os.EX_OK
        assert json.loads(capsys.readouterr().out)["devices"][0]["usable"] is True

    def test_list_table(self, wired_cli, add_device, capsys, monkeypatch):
        monkeypatch.setenv("COLUMNS", "300")
        device = add_device(0)

        assert cli.main(["list"]) == os.EX_OK

        out = capsys.readouterr().out
        assert device in out
        assert "Format Info" in out

    def test_save_and_load(self, wired_cli, add_device, fake_gateway, tmp_path):
        config_dir = tmp_path / "snapshots"
        device = add_device(0, serial="SN0")

        assert cli.main(["--config-dir", str(config_dir), "save"]) == os.EX_OK
        assert (config_dir / "SN0.json").exists()

        assert cli.main(["--config-dir", str(config_dir), "load", "SN0"]) == os.EX_OK
        assert "brightness" in {name for _, name, _ in fake_gateway.set_calls}
        assert {dev for dev, _, _ in fake_gateway.set_calls} == {device}

    def test_unknown_serial_is_fatal(self, wired_cli, add_device, tmp_path, capsys):
        add_device(0, serial="SN0")

        code = cli.main(["--config-dir", str(tmp_path), "save", "MISSING"])

        assert code == os.EX_NOINPUT
        assert "No device found with serial number MISSING" in capsys.readouterr().err

    def test_skipped_devices_still_succeed(
        self, wired_cli, add_device, metadata_formats, tmp_path
    ):
        add_device(0, formats=metadata_formats)
        add_device(1, serial=None)

        assert cli.main(["--config-dir", str(tmp_path), "save"]) == os.EX_OK
        assert cli.main(["--config-dir", str(tmp_path), "load"]) == os.EX_OK

    def test_config_dir_that_is_a_file(self, wired_cli, add_device, tmp_path, capsys):
        add_device(0, serial="SN0")
        not_a_dir = tmp_path / "snapshots"
        not_a_dir.write_text("occupied")

        code = cli.main(["--config-dir", str(not_a_dir), "save"])

        assert code == os.EX_CANTCREAT
        assert "Cannot use snapshot directory" in capsys.readouterr().err
        assert not_a_dir.read_text() == "occupied"

    def test_no_devices_is_not_an_error(self, wired_cli, tmp_path):
        assert cli.main(["--config-dir", str(tmp_path), "load"]) == os.EX_OK

    def test_unknown_command_is_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["frobnicate"])
        assert exc_info.value.code == 2
