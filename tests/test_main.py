"""Tests for the classify-and-tag pipeline and CLI."""

import json
import logging
import os
import sys
from unittest.mock import patch

import httpx
import pytest
from click.testing import CliRunner

from ticket_tagger.config import AppConfig, ClassifierConfig, TaggerConfig
from ticket_tagger.main import (
    PipelineError,
    build_log_handlers,
    classify_and_tag,
    main,
    setup_logging,
)
from ticket_tagger.models import TagOutcome, Ticket, TrainingExample


@pytest.fixture
def config():
    return AppConfig(
        tagger=TaggerConfig(api_url="https://api.devrev.ai", api_key="test-token"),
        classifier=ClassifierConfig(training_data_path=None),
        log_level="INFO",
    )


@pytest.fixture
def ticket():
    return Ticket(id="12345", content="Feature request to add dark mode")


class TestClassifyAndTag:
    """Tests for classify_and_tag."""

    def test_end_to_end(self, config, ticket):
        """Test the reference ticket is classified and posted."""
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"ok": True})

        result, outcome = classify_and_tag(
            ticket, config, transport=httpx.MockTransport(handler)
        )

        assert result.label == "feature request"
        assert outcome.success is True
        assert str(captured[0].url) == "https://api.devrev.ai/tickets/tag"
        assert json.loads(captured[0].content) == {
            "ticketId": "12345",
            "tags": ["feature request"],
            "reasoning": "Ticket classified as 'feature request' based on text similarity.",
        }

    def test_server_error_does_not_raise(self, config, ticket, caplog):
        """Test tagging failures are returned, not raised."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(500, json={"error": "server error"})
        )

        with caplog.at_level(logging.ERROR):
            result, outcome = classify_and_tag(ticket, config, transport=transport)

        assert result.label == "feature request"
        assert outcome.success is False
        assert "server error" in caplog.text

    def test_dry_run_skips_tagging(self, config, ticket):
        with patch("ticket_tagger.main.tag_ticket") as mock_tag:
            result, outcome = classify_and_tag(ticket, config, dry_run=True)

        mock_tag.assert_not_called()
        assert outcome is None
        assert result.label == "feature request"

    def test_custom_examples(self, config):
        examples = [
            TrainingExample(text="Printer is offline", label="hardware"),
            TrainingExample(text="Reset my password", label="access"),
        ]
        result, _ = classify_and_tag(
            Ticket(id="1", content="password reset please"),
            config,
            examples=examples,
            dry_run=True,
        )
        assert result.label == "access"

    def test_training_data_from_config(self, tmp_path):
        path = tmp_path / "corpus.yaml"
        path.write_text("- text: VPN is down\n  label: network\n", encoding="utf-8")
        config = AppConfig(
            tagger=TaggerConfig(api_key="x"),
            classifier=ClassifierConfig(training_data_path=path),
        )

        result, _ = classify_and_tag(Ticket(id="1", content="vpn"), config, dry_run=True)
        assert result.label == "network"

    def test_bad_training_data_raises_pipeline_error(self, tmp_path):
        path = tmp_path / "corpus.yaml"
        path.write_text("[]", encoding="utf-8")
        config = AppConfig(classifier=ClassifierConfig(training_data_path=path))

        with pytest.raises(PipelineError, match="Training data"):
            classify_and_tag(Ticket(id="1", content="x"), config, dry_run=True)

    def test_classification_error_raises_pipeline_error(self, config, ticket):
        with pytest.raises(PipelineError, match="Classification failed"):
            classify_and_tag(ticket, config, examples=[], dry_run=True)


class TestCLI:
    """Tests for the click entry point."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_dry_run_defaults(self, runner):
        """Test the default ticket is classified without an API key."""
        with patch.dict(os.environ, {"DEVREV_API_KEY": ""}):
            result = runner.invoke(main, ["--dry-run"])

        assert result.exit_code == 0
        assert "12345: feature request" in result.output

    def test_missing_api_key_fails(self, runner):
        with patch.dict(os.environ, {"DEVREV_API_KEY": ""}):
            result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output

    def test_tagging_failure_exit_code(self, runner):
        failed = TagOutcome(
            ticket_id="12345",
            success=False,
            status_code=500,
            payload={"error": "server error"},
        )
        with patch.dict(os.environ, {"DEVREV_API_KEY": "token"}), \
                patch("ticket_tagger.main.tag_ticket", return_value=failed):
            result = runner.invoke(main, ["--ticket-id", "777"])

        assert result.exit_code == 1
        assert "Tagging failed for ticket 777" in result.output

    def test_tagging_success(self, runner):
        ok = TagOutcome(ticket_id="12345", success=True, status_code=200, payload={})
        with patch.dict(os.environ, {"DEVREV_API_KEY": "token"}), \
                patch("ticket_tagger.main.tag_ticket", return_value=ok) as mock_tag:
            result = runner.invoke(main, ["--content", "Bug in the login page"])

        assert result.exit_code == 0
        args = mock_tag.call_args.args
        assert args[1] == "12345"
        assert args[2] == ["bug report"]

    def test_validate_only(self, runner):
        with patch.dict(os.environ, {"DEVREV_API_KEY": "token"}):
            result = runner.invoke(main, ["--validate-only"])
        assert result.exit_code == 0

    def test_training_data_option(self, runner, tmp_path):
        path = tmp_path / "corpus.yaml"
        path.write_text("- text: Laptop screen broken\n  label: hardware\n", encoding="utf-8")

        result = runner.invoke(
            main,
            ["--dry-run", "--training-data", str(path), "--content", "screen"],
        )
        assert result.exit_code == 0
        assert "hardware" in result.output

    def test_invalid_log_level_reported_as_config_error(self, runner):
        """Test an unknown LOG_LEVEL reaches configuration validation."""
        with patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}):
            result = runner.invoke(main, ["--dry-run"])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output
        assert "Unexpected error" not in result.output


def test_classify_and_tag_non_ascii_api_key(caplog):
    """Test header encoding failures come back as a failed outcome."""
    config = AppConfig(
        tagger=TaggerConfig(api_url="https://api.devrev.ai", api_key="tök€n"),
        classifier=ClassifierConfig(training_data_path=None),
    )
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))

    with caplog.at_level(logging.ERROR):
        result, outcome = classify_and_tag(
            Ticket(id="12345", content="x"), config, transport=transport
        )

    assert result.label == "feature request"
    assert outcome.success is False
    assert "Error tagging ticket 12345" in caplog.text


class TestLogging:
    """Tests for logging setup."""

    def test_errors_routed_to_stderr(self):
        stdout_handler, stderr_handler = build_log_handlers()
        info = logging.LogRecord("x", logging.INFO, __file__, 1, "info", None, None)
        error = logging.LogRecord("x", logging.ERROR, __file__, 1, "error", None, None)

        assert stdout_handler.stream is sys.stdout
        assert bool(stdout_handler.filter(info)) is True
        assert bool(stdout_handler.filter(error)) is False

        assert stderr_handler.stream is sys.stderr
        assert stderr_handler.level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self):
        with patch("ticket_tagger.main.logging.basicConfig") as mock_config:
            setup_logging("LOUD")

        assert mock_config.call_args.kwargs["level"] == logging.INFO

    def test_known_level(self):
        with patch("ticket_tagger.main.logging.basicConfig") as mock_config:
            setup_logging("debug")

        assert mock_config.call_args.kwargs["level"] == logging.DEBUG
