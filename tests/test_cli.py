"""Tests for argument parsing, configuration and the main entry point."""

import logging
from unittest import mock

import pytest

import reflex
from scanners.probe import ProbeExecutor, Success
from utils.config import (
    DEFAULT_OUTPUT, DEFAULT_THREADS, DEFAULT_TIMEOUT, USER_AGENT, ScanConfig,
)
from utils.logger import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_defaults():
    args = reflex.parse_arguments([])
    config = ScanConfig.from_args(args)

    assert config.threads == DEFAULT_THREADS
    assert config.timeout == DEFAULT_TIMEOUT
    assert config.output == DEFAULT_OUTPUT
    assert config.input_file is None
    assert config.verbose is False
    assert config.headers == {}
    assert config.threshold == 10
    assert config.cooldown == 60


def test_repeated_headers_are_collected():
    args = reflex.parse_arguments([
        '-H', 'X-Bug-Bounty: me',
        '-H', 'User-Agent: Custom/1.0',
        '-t', '5', '--timeout', '3', '-v', '-f', 'urls.txt', '-o', 'out.txt',
    ])
    config = ScanConfig.from_args(args)

    assert config.headers == {'X-Bug-Bounty': 'me', 'User-Agent': 'Custom/1.0'}
    assert config.threads == 5
    assert config.timeout == 3
    assert config.verbose is True
    assert config.input_file == 'urls.txt'
    assert config.output == 'out.txt'

    session = ProbeExecutor(headers=config.headers).new_session()
    assert session.headers['User-Agent'] == 'Custom/1.0'
    assert session.headers['User-Agent'] != USER_AGENT


def test_invalid_thread_count_is_rejected():
    with pytest.raises(SystemExit):
        reflex.parse_arguments(['-t', '0'])


def test_main_exits_with_error_on_missing_input(tmp_path, capsys):
    code = reflex.main([
        '-f', str(tmp_path / 'missing.txt'),
        '-o', str(tmp_path / 'out.txt'),
        '--log-file', str(tmp_path / 'reflex.log'),
        '--no-color',
    ])

    assert code == 1
    assert "Error opening file" in capsys.readouterr().out
    assert not (tmp_path / 'out.txt').exists()


def test_main_scans_file_and_writes_findings(tmp_path, capsys):
    urls = tmp_path / 'urls.txt'
    urls.write_text("http://t/x?q=1&r=2\nhttp://t/plain\n")
    output = tmp_path / 'out.txt'

    def fake_execute(self, session, url):
        if "q=ReflectCheckXSS" in url:
            return Success(b"hello ReflectCheckXSS")
        return Success(b"hello")

    with mock.patch.object(ProbeExecutor, 'execute', fake_execute):
        code = reflex.main([
            '-f', str(urls),
            '-o', str(output),
            '-t', '2',
            '--log-file', str(tmp_path / 'reflex.log'),
            '--no-color',
        ])

    assert code == 0
    assert output.read_text() == "http://t/x?q={payload}&r=2\n"
    out = capsys.readouterr().out
    assert "Reflection found: http://t/x?q={payload}&r=2" in out
    assert "Reflections Found: 1" in out
    assert "Write Failures: 0" in out
    assert "Scan completed." in out
