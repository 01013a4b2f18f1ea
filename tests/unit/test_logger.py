"""
Logger Unit Tests
=================
Source-tag parsing, silent mode and file routing.
"""

import logging
from unittest.mock import MagicMock


class TestLogger:
    def test_parse_source_tag(self):
        from txlander.shared.system.logging import Logger

        assert Logger._parse_source("[watcher] reached confirmed") == ("WATCHER", "reached confirmed")

    def test_parse_without_tag_defaults_to_system(self):
        from txlander.shared.system.logging import Logger

        assert Logger._parse_source("plain message") == ("SYSTEM", "plain message")

    def test_silent_mode_suppresses_console(self, monkeypatch):
        import txlander.shared.system.logging as log_module

        printer = MagicMock()
        monkeypatch.setattr(log_module._console, "print", printer)
        log_module.Logger.set_silent(True)

        log_module.Logger.info("[SUBMIT] hidden")

        printer.assert_not_called()

    def test_console_output_when_not_silent(self, monkeypatch):
        import txlander.shared.system.logging as log_module

        printer = MagicMock()
        monkeypatch.setattr(log_module._console, "print", printer)
        monkeypatch.setattr(log_module.Settings, "SILENT_MODE", False)
        log_module.Logger.set_silent(False)

        log_module.Logger.warning("[BROADCAST] send failed")

        printer.assert_called_once()
        rendered = printer.call_args[0][0].plain
        assert "BROADCAST" in rendered
        assert "send failed" in rendered

    def test_debug_goes_to_file_only(self, monkeypatch):
        import txlander.shared.system.logging as log_module

        printer = MagicMock()
        records = []
        monkeypatch.setattr(log_module._console, "print", printer)
        monkeypatch.setattr(
            log_module.file_logger, "log", lambda level, msg: records.append((level, msg))
        )
        log_module.Logger.set_silent(False)

        log_module.Logger.debug("[RPC] Fresh blockhash")

        printer.assert_not_called()
        assert records == [(logging.DEBUG, "[RPC] Fresh blockhash")]
