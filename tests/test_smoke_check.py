import importlib.util
import os

import pytest

from greeting_service.app import build_payload
from greeting_service.config import Settings
from greeting_service.probe import ProbeError

_SCRIPT = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'scripts', 'smoke_check.py')


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location('smoke_check', _SCRIPT)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def test_default_url_uses_port(script, monkeypatch):
    monkeypatch.setenv('PORT', '8080')
    assert script.parse_args([]).url == 'http://127.0.0.1:8080/'
    monkeypatch.delenv('PORT')
    assert script.parse_args([]).url == 'http://127.0.0.1:3000/'


def test_healthy_service_exits_zero(script, monkeypatch, capsys):
    monkeypatch.setattr(script, 'wait_until_ready', lambda url, **kw: build_payload(Settings()))
    assert script.smoke_check(['http://svc/', '--expect-db-url', 'not-set']) == 0
    assert 'Service healthy' in capsys.readouterr().out


def test_unreachable_service_exits_one(script, monkeypatch):
    def unreachable(url, **kw):
        raise ProbeError('down')

    monkeypatch.setattr(script, 'wait_until_ready', unreachable)
    assert script.smoke_check(['http://svc/']) == 1


def test_bad_payload_exits_one(script, monkeypatch, capsys):
    monkeypatch.setattr(script, 'wait_until_ready', lambda url, **kw: {'message': 'hi'})
    assert script.smoke_check(['http://svc/']) == 1
    assert "missing field 'time'" in capsys.readouterr().out


def test_array_payload_exits_one(script, monkeypatch, capsys):
    monkeypatch.setattr(script, 'wait_until_ready', lambda url, **kw: [1, 2])
    assert script.smoke_check(['http://svc/']) == 1
    assert 'payload is not a JSON object' in capsys.readouterr().out
