import json

import pytest

import cli
from config import Settings
from conftest import FakeFavro, time_card
from service import build_service

TODAY_CARD = time_card('c1', 'BOK', 5106, {'fu1': [{'value': 5400000, 'description': 'Fixed bug', 'createdAt': '2030-01-01T09:00:00Z'}]})


@pytest.fixture
def wired(tmp_path, monkeypatch):
    favro = FakeFavro(
        widgets={'w1': [[{'cardCommonId': 'c1', 'sequentialId': 5106, 'prefix': 'BOK'}]]},
        details={'c1': TODAY_CARD},
        users=[{'userId': 'fu1', 'email': 'dev@example.com', 'fullName': 'Dev Person'}],
    )
    settings = Settings(
        email='bot@example.com', token='t', organization_id='org', time_cf_id='cf-time',
        widget_ids=['w1'], db_path=str(tmp_path / 'links.db'),
    )
    monkeypatch.setattr(cli, 'load_settings', lambda path=None: settings)
    monkeypatch.setattr(cli, 'setup_logging', lambda *a, **k: None)
    monkeypatch.setattr(cli, 'build_service', lambda s, db=None, remote=True: build_service(s, db=db, client=favro))
    return favro


def test_link_then_unlink(wired, capsys):
    assert cli.main(['link', '--caller', 'd1', '--email', 'DEV@example.com']) == 0
    assert 'Dev Person' in capsys.readouterr().out
    assert cli.main(['unlink', '--caller', 'd1']) == 0
    assert 'Unlinked.' in capsys.readouterr().out
    assert cli.main(['unlink', '--caller', 'd1']) == 0
    assert 'You were not linked.' in capsys.readouterr().out


def test_timesheet_unlinked_reports_error(wired, capsys):
    assert cli.main(['timesheet', '--caller', 'd1', '--cards', 'BOK-5106']) == 1
    assert 'not linked' in capsys.readouterr().err
    assert wired.calls == []


def test_timesheet_json_to_file_and_retract(wired, tmp_path, capsys):
    cli.main(['link', '--caller', 'd1', '--email', 'dev@example.com'])
    out = tmp_path / 'reports' / 'today.json'
    code = cli.main([
        'timesheet', '--caller', 'd1', '--cards', 'BOK-5106, nope', '--output', 'json',
        '--out-file', str(out), '--channel', 'general', '--message-id', 'msg-9',
    ])
    assert code == 0
    data = json.loads(out.read_text(encoding='utf-8'))
    assert [l['key'] for l in data['lines']] == ['BOK-5106', 'nope']
    assert data['lines'][1]['kind'] == 'not_found'
    capsys.readouterr()

    assert cli.main(['retract', '--caller', 'd1', '--channel', 'general']) == 0
    assert capsys.readouterr().out.strip() == 'msg-9'
    assert cli.main(['retract', '--caller', 'd1', '--channel', 'general']) == 1


def test_timesheet_text_to_stdout(wired, capsys):
    cli.main(['link', '--caller', 'd1', '--email', 'dev@example.com'])
    capsys.readouterr()
    assert cli.main(['timesheet', '--caller', 'd1', '--cards', 'BOK-5106']) == 0
    out = capsys.readouterr().out
    assert out.startswith("Today's update\nBOK-5106 - ")


def test_write_output_creates_directories(tmp_path):
    target = tmp_path / 'a' / 'b' / 'r.md'
    cli.write_output('md', '# hi', str(target))
    assert target.read_text(encoding='utf-8') == '# hi'


def test_missing_config_file_is_reported(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(cli, 'setup_logging', lambda *a, **k: None)
    missing = tmp_path / 'nope.yaml'
    assert cli.main(['--config', str(missing), 'unlink', '--caller', 'd1']) == 1
    assert 'Config file not found' in capsys.readouterr().err


def test_local_commands_need_no_credentials(tmp_path, monkeypatch, capsys):
    settings = Settings(db_path=str(tmp_path / 'links.db'))
    monkeypatch.setattr(cli, 'load_settings', lambda path=None: settings)
    monkeypatch.setattr(cli, 'setup_logging', lambda *a, **k: None)
    assert cli.main(['unlink', '--caller', 'd1']) == 0
    assert 'You were not linked.' in capsys.readouterr().out
    assert cli.main(['retract', '--caller', 'd1', '--channel', 'general']) == 1
    assert 'FAVRO_' not in capsys.readouterr().err
    assert cli.main(['link', '--caller', 'd1', '--email', 'dev@example.com']) == 1
    assert 'FAVRO_EMAIL' in capsys.readouterr().err
