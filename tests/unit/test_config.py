"""
Unit tests for ServerConfig and the CLI argument handling.
"""

import logging
from pathlib import Path

import pytest

from rawhttp import __version__
from rawhttp.__main__ import build_parser, config_from_args, main
from rawhttp.config import ServerConfig


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 4221
        assert config.directory == "."
        assert config.buffer_size == 1024
        assert config.backlog == 128
        assert config.log_level == "INFO"

    def test_defaults_validate(self):
        ServerConfig().validate()

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"buffer_size": 0},
        {"backlog": 0},
        {"accept_timeout": 0},
        {"log_level": "LOUD"},
        {"directory": "/definitely/not/a/real/dir"},
    ])
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    def test_level(self):
        assert ServerConfig(log_level="debug").level == logging.DEBUG
        assert ServerConfig().level == logging.INFO

    def test_root_is_absolute(self, served_dir: Path):
        assert ServerConfig(directory=str(served_dir)).root == served_dir.resolve()

    def test_from_env(self, monkeypatch, served_dir: Path):
        monkeypatch.setenv("RAWHTTP_HOST", "127.0.0.1")
        monkeypatch.setenv("RAWHTTP_PORT", "8081")
        monkeypatch.setenv("RAWHTTP_DIRECTORY", str(served_dir))
        monkeypatch.setenv("RAWHTTP_BUFFER_SIZE", "2048")
        monkeypatch.setenv("RAWHTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 8081
        assert config.directory == str(served_dir)
        assert config.buffer_size == 2048
        assert config.log_level == "DEBUG"

    def test_from_env_defaults(self, monkeypatch):
        for name in ("RAWHTTP_HOST", "RAWHTTP_PORT", "RAWHTTP_DIRECTORY",
                     "RAWHTTP_BUFFER_SIZE", "RAWHTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()


class TestCLI:
    """Tests for the command-line entry point."""

    def test_flags_override_env(self, monkeypatch, served_dir: Path):
        monkeypatch.setenv("RAWHTTP_PORT", "9000")
        monkeypatch.setenv("RAWHTTP_DIRECTORY", "/tmp")

        args = build_parser().parse_args(["--directory", str(served_dir), "-p", "0"])
        config = config_from_args(args)

        assert config.directory == str(served_dir)
        assert config.port == 0

    def test_env_used_when_flag_missing(self, monkeypatch):
        monkeypatch.setenv("RAWHTTP_PORT", "9000")

        config = config_from_args(build_parser().parse_args([]))

        assert config.port == 9000

    def test_short_flags(self, served_dir: Path):
        args = build_parser().parse_args(
            ["-d", str(served_dir), "-H", "127.0.0.1", "-p", "80", "-l", "DEBUG", "--buffer-size", "64"]
        )

        assert args.directory == str(served_dir)
        assert args.host == "127.0.0.1"
        assert args.port == 80
        assert args.log_level == "DEBUG"
        assert args.buffer_size == 64

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_invalid_directory_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--directory", "/definitely/not/a/real/dir"])

        assert exc_info.value.code == 1
        assert "Directory does not exist" in capsys.readouterr().err

    def test_bind_failure_exits_1(self, served_dir: Path):
        """A port already in use makes the CLI exit with status 1."""
        import socket

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            with pytest.raises(SystemExit) as exc_info:
                main(["-d", str(served_dir), "-H", "127.0.0.1", "-p", str(port)])

        assert exc_info.value.code == 1
