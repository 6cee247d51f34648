"""
Unit tests for FileConverter.

The translation client is mocked; files live in pytest's tmp_path.
"""
import asyncio
from pathlib import Path

import pytest

from erbify.core.exceptions import ServiceError, ServiceAuthenticationError, ServiceRateLimitError
from erbify.core.models import ConversionTask, Success, Failure


def _task(path: Path, source_format: str = "haml") -> ConversionTask:
    return ConversionTask(path=path, source_format=source_format)


class TestFileConverter:
    """Tests for FileConverter.convert."""

    @pytest.mark.asyncio
    async def test_converts_and_replaces_original(self, converter, client, counters, make_template):
        source = make_template("views/index.html.haml", "%h1= @title\n")
        client.translate.return_value = "<h1><%= @title %></h1>"

        outcome = await converter.convert(_task(source))

        output = source.parent / "index.html.erb"
        assert outcome == Success(output_path=output)
        assert output.read_text(encoding="utf-8") == "<h1><%= @title %></h1>"
        assert not source.exists()
        client.translate.assert_awaited_once_with("%h1= @title\n", "haml")
        assert counters.converted == 1

    @pytest.mark.asyncio
    async def test_bare_name_output(self, converter, make_template):
        source = make_template("header.haml")
        outcome = await converter.convert(_task(source))
        assert outcome.output_path == source.parent / "header.html.erb"
        assert outcome.output_path.exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t\n"])
    async def test_empty_file_is_skipped_without_service_call(self, converter, client, counters, make_template, content):
        source = make_template("blank.haml", content)

        outcome = await converter.convert(_task(source))

        assert outcome == Success(output_path=source, skipped=True)
        client.translate.assert_not_awaited()
        assert source.read_text(encoding="utf-8") == content
        assert not (source.parent / "blank.html.erb").exists()
        assert counters.converted == 0
        assert counters.skipped == 1

    @pytest.mark.asyncio
    async def test_service_error_becomes_failure(self, converter, client, counters, make_template, log_entries):
        source = make_template("index.html.haml", "%p hi\n")
        client.translate.side_effect = ServiceError("quota exceeded")

        outcome = await converter.convert(_task(source))

        assert isinstance(outcome, Failure)
        assert outcome.reason == "quota exceeded"
        assert outcome.recoverable is True
        assert outcome.error_type == "ServiceError"
        assert source.read_text(encoding="utf-8") == "%p hi\n"
        assert not (source.parent / "index.html.erb").exists()
        assert counters.converted == 0
        assert any(e['type'] == 'file_failure' for e in log_entries)

    @pytest.mark.asyncio
    async def test_rate_limit_failure_carries_retry_after(self, converter, client, make_template):
        source = make_template("a.haml")
        client.translate.side_effect = ServiceRateLimitError("quota exceeded", retry_after=7.0)

        outcome = await converter.convert(_task(source))

        assert outcome.ok is False
        assert outcome.retry_after == 7.0
        assert outcome.recoverable is True

    @pytest.mark.asyncio
    async def test_authentication_error_is_not_recoverable(self, converter, client, make_template):
        source = make_template("a.haml")
        client.translate.side_effect = ServiceAuthenticationError("bad key")

        outcome = await converter.convert(_task(source))

        assert outcome.ok is False
        assert outcome.recoverable is False

    @pytest.mark.asyncio
    async def test_missing_file_is_not_recoverable(self, converter, client, tmp_path):
        outcome = await converter.convert(_task(tmp_path / "missing.haml"))

        assert isinstance(outcome, Failure)
        assert outcome.recoverable is False
        assert outcome.error_type == "FileNotFoundError"
        client.translate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_not_recoverable(self, converter, client, tmp_path):
        source = tmp_path / "latin1.haml"
        source.write_bytes("%p caf\xe9".encode("latin-1"))

        outcome = await converter.convert(_task(source))

        assert outcome.ok is False
        assert outcome.recoverable is False
        assert outcome.error_type == "FileReadError"
        assert source.exists()

    @pytest.mark.asyncio
    async def test_write_failure_keeps_original(self, converter, make_template, monkeypatch):
        source = make_template("index.html.haml", "%p hi\n")

        async def broken_write(path, content):
            raise OSError("read-only file system")

        monkeypatch.setattr("erbify.core.converter.write_text_atomic", broken_write)

        outcome = await converter.convert(_task(source))

        assert outcome.ok is False
        assert "read-only file system" in outcome.reason
        assert outcome.error_type == "FileWriteError"
        assert source.read_text(encoding="utf-8") == "%p hi\n"

    @pytest.mark.asyncio
    async def test_delete_failure_reports_both_files(self, converter, make_template, monkeypatch):
        source = make_template("index.html.haml", "%p hi\n")

        async def broken_remove(path):
            raise OSError("device busy")

        monkeypatch.setattr("erbify.core.converter.remove_file", broken_remove)

        outcome = await converter.convert(_task(source))

        assert outcome.ok is False
        assert "could not remove" in outcome.reason
        assert source.exists()
        assert (source.parent / "index.html.erb").exists()

    @pytest.mark.asyncio
    async def test_output_equal_to_input_is_not_deleted(self, converter, client, make_template):
        source = make_template("page.html.erb", "<p><%= old %></p>")
        client.translate.return_value = "<p><%= new %></p>"

        outcome = await converter.convert(_task(source, source_format="erb"))

        assert outcome == Success(output_path=source)
        assert source.read_text(encoding="utf-8") == "<p><%= new %></p>"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, converter, client, make_template):
        source = make_template("a.haml")
        client.translate.side_effect = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await converter.convert(_task(source))
