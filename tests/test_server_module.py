import importlib

import pytest


def test_start_server_runs_threaded_app(monkeypatch):
    server = importlib.import_module('dungeon_quest.server')
    calls = {}

    def fake_run(**kwargs):
        calls.update(kwargs)

    monkeypatch.setattr(server.app, 'run', fake_run)
    server.start_server(host='127.0.0.1', port=5050, debug=True)
    assert calls == {'host': '127.0.0.1', 'port': 5050, 'debug': True, 'threaded': True}


def test_start_server_exits_cleanly_on_ctrl_c(monkeypatch, capsys):
    server = importlib.import_module('dungeon_quest.server')

    def fake_run(**kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(server.app, 'run', fake_run)
    with pytest.raises(SystemExit) as exc:
        server.start_server()
    assert exc.value.code == 0
    assert 'Server stopped by user' in capsys.readouterr().out


def test_create_app_refreshes_settings(monkeypatch):
    from dungeon_quest import create_app

    monkeypatch.setenv('DQ_VISIBILITY_RADIUS', '3')
    app = create_app()
    assert app.config['GAME_SETTINGS'].visibility_radius == 3
    monkeypatch.delenv('DQ_VISIBILITY_RADIUS')
    assert create_app().config['GAME_SETTINGS'].visibility_radius == 8
    assert 'game' in app.blueprints
