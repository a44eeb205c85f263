"""Tests for the service entry point"""

from unittest.mock import patch

from vpc_planner import main


class TestStartup:
    """Test suite for startup wiring"""

    @patch("vpc_planner.main.uvicorn.run")
    def test_start_rest_api_uses_configured_port(self, mock_run, monkeypatch):
        monkeypatch.setenv("REST_PORT", "9123")

        main.start_rest_api()

        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args[0].title == "VPC Topology Planner API"
        assert kwargs["port"] == 9123

    @patch("vpc_planner.main.start_rest_api")
    @patch("vpc_planner.main.configure_logging")
    def test_main_configures_logging_then_serves(self, mock_configure, mock_start):
        main.main()

        mock_configure.assert_called_once_with()
        mock_start.assert_called_once_with()
