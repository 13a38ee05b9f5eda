"""Test the uvicorn entry point."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from timeshift_service.__main__ import main
from timeshift_service.main import app


def test_main_runs_uvicorn_with_env(monkeypatch) -> None:
    """Test HOST/PORT are passed to uvicorn."""
    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "9100")

    with patch("timeshift_service.__main__.uvicorn") as mock_uvicorn:
        server = MagicMock()
        mock_uvicorn.Server.return_value = server

        main()

    _, kwargs = mock_uvicorn.Config.call_args
    assert mock_uvicorn.Config.call_args.args[0] is app
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9100
    server.run.assert_called_once()
