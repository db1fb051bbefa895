"""Unit tests for the LiveText entry point."""

from unittest.mock import patch

import pytest

from lens_translator.modules.LiveText import main_live_text
from lens_translator.modules.LiveText.main_live_text import cli_overrides, main, parse_args


class TestParseArgs:

    def test_defaults_leave_config_untouched(self):
        args = parse_args([])

        assert all(value is None for value in cli_overrides(args).values())
        assert args.console_output is True

    def test_overrides(self):
        args = parse_args([
            "--from", "fr",
            "--to", "de",
            "--interval", "2",
            "--device", "1",
            "--resolution", "veryHigh",
            "--api",
            "--api-port", "9001",
            "--log-level", "debug",
        ])

        overrides = cli_overrides(args)
        assert overrides["languages.source"] == "fr"
        assert overrides["languages.target"] == "de"
        assert overrides["capture.interval_s"] == 2.0
        assert overrides["capture.device"] == "1"
        assert overrides["capture.resolution_preset"] == "veryHigh"
        assert overrides["api.enabled"] is True
        assert overrides["api.port"] == 9001
        assert overrides["logging.level"] == "debug"

    def test_no_api(self):
        assert cli_overrides(parse_args(["--no-api"]))["api.enabled"] is False

    @pytest.mark.parametrize("argv", [
        ["--to", "xx"],
        ["--interval", "0"],
        ["--resolution", "huge"],
        ["--api", "--no-api"],
    ])
    def test_rejected_arguments(self, argv):
        with pytest.raises(SystemExit):
            parse_args(argv)


class TestMain:

    @pytest.fixture(autouse=True)
    def quiet_process_setup(self):
        with patch.object(main_live_text, "configure_logging"), \
                patch.object(main_live_text, "install_exception_handlers"):
            yield

    @pytest.mark.asyncio
    async def test_exits_1_without_camera(self, tmp_path, camera_source):
        camera_source.cameras = []

        with patch.object(main_live_text, "OpenCVCameraSource", return_value=camera_source), \
                patch.object(main_live_text, "install_signal_handlers"):
            exit_code = await main(["--config", str(tmp_path / "missing.txt")])

        assert exit_code == 1

    @pytest.mark.asyncio
    async def test_runs_until_shutdown(self, tmp_path, camera_source, camera_handle, recognizer, translator):
        def request_shutdown_soon(app, loop):
            loop.call_later(0.15, lambda: loop.create_task(app.shutdown()))

        with patch.object(main_live_text, "OpenCVCameraSource", return_value=camera_source), \
                patch.object(main_live_text, "TesseractRecognizer", return_value=recognizer), \
                patch.object(main_live_text, "GoogleTranslator", return_value=translator), \
                patch.object(main_live_text, "install_signal_handlers", side_effect=request_shutdown_soon):
            exit_code = await main(["--config", str(tmp_path / "missing.txt"), "--interval", "0.05"])

        assert exit_code == 0
        assert camera_handle.captures >= 1
        assert camera_handle.release_calls == 1
        assert translator.close_calls == 1

    @pytest.mark.asyncio
    async def test_invalid_language_in_config(self, tmp_path):
        config_path = tmp_path / "config.txt"
        config_path.write_text("languages.target = pt\n", encoding="utf-8")

        exit_code = await main(["--config", str(config_path)])

        assert exit_code == 2
