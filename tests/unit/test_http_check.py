"""Tests for the HTTP reachability helpers."""

import logging
from unittest.mock import MagicMock, patch

import requests

from afdeploy.http_check import PLAYBACK_RESULT, HttpChecker


class TestCheckAddress:
    """Tests for HttpChecker.check_address."""

    @patch("afdeploy.http_check.requests.get")
    def test_reports_status(self, mock_get, deploy_config):
        mock_get.return_value = MagicMock(status_code=200, reason="OK")

        result = HttpChecker(deploy_config).check_address("http://app.azurewebsites.net")

        assert result == "Ping: http://app.azurewebsites.net: 200 OK"
        mock_get.assert_called_once_with(
            "http://app.azurewebsites.net", headers=None, timeout=300.0
        )

    @patch("afdeploy.http_check.requests.get")
    def test_passes_headers(self, mock_get, deploy_config):
        mock_get.return_value = MagicMock(status_code=404, reason="")

        result = HttpChecker(deploy_config).check_address("http://x", {"Host": "y"})

        assert result == "Ping: http://x: 404"
        assert mock_get.call_args.kwargs["headers"] == {"Host": "y"}

    @patch("afdeploy.http_check.requests.get")
    def test_failure_logged_not_raised(self, mock_get, deploy_config, caplog):
        mock_get.side_effect = requests.ConnectionError("name resolution failed")

        with caplog.at_level(logging.WARNING, logger="afdeploy.tests"):
            result = HttpChecker(deploy_config).check_address("http://x")

        assert result == PLAYBACK_RESULT
        assert "name resolution failed" in caplog.text

    @patch("afdeploy.http_check.requests.get")
    def test_shorter_timeout_wins(self, mock_get, deploy_config):
        mock_get.return_value = MagicMock(status_code=200, reason="OK")

        HttpChecker(deploy_config).check_address("http://x", timeout=12.5)

        assert mock_get.call_args.kwargs["timeout"] == 12.5

    @patch("afdeploy.http_check.requests.get")
    def test_timeout_capped_at_configured_limit(self, mock_get, deploy_config):
        mock_get.return_value = MagicMock(status_code=200, reason="OK")

        HttpChecker(deploy_config).check_address("http://x", timeout=1000.0)

        assert mock_get.call_args.kwargs["timeout"] == 300.0

    @patch("afdeploy.http_check.requests.get")
    def test_playback_skips_request(self, mock_get, deploy_config):
        deploy_config.playback = True

        assert HttpChecker(deploy_config).check_address("http://x") == PLAYBACK_RESULT
        mock_get.assert_not_called()


class TestPostAddress:
    """Tests for HttpChecker.post_address."""

    @patch("afdeploy.http_check.requests.post")
    def test_posts_body(self, mock_post, deploy_config):
        mock_post.return_value = MagicMock(status_code=201, reason="Created")

        result = HttpChecker(deploy_config).post_address("http://x", "payload")

        assert result == "StatusCode: 201, ReasonPhrase: 'Created'"
        assert mock_post.call_args.kwargs["data"] == "payload"

    @patch("afdeploy.http_check.requests.post")
    def test_timeout_returns_fallback(self, mock_post, deploy_config):
        mock_post.side_effect = requests.Timeout("timed out")

        assert HttpChecker(deploy_config).post_address("http://x", "") == PLAYBACK_RESULT

    @patch("afdeploy.http_check.requests.post")
    def test_post_timeout_capped(self, mock_post, deploy_config):
        mock_post.return_value = MagicMock(status_code=200, reason="OK")

        HttpChecker(deploy_config).post_address("http://x", "", timeout=7.0)

        assert mock_post.call_args.kwargs["timeout"] == 7.0
