import uvicorn

from stenella.__main__ import main


def test_main_runs_uvicorn_with_app_factory(monkeypatch):
    calls = {}

    def fake_run(target, **kwargs):
        calls["target"] = target
        calls.update(kwargs)

    monkeypatch.setattr(uvicorn, "run", fake_run)

    assert main(["--host", "0.0.0.0", "--port", "9999"]) == 0
    assert calls["target"] == "stenella.main:create_app"
    assert calls["factory"] is True
    assert calls["host"] == "0.0.0.0"
    assert calls["port"] == 9999


def test_main_falls_back_to_settings(monkeypatch):
    calls = {}
    monkeypatch.setattr(uvicorn, "run", lambda target, **kw: calls.update(kw))
    monkeypatch.setenv("STENELLA_PORT", "8181")

    main([])

    assert calls["host"] == "127.0.0.1"
    assert calls["port"] == 8181
    assert calls["log_level"] == "info"
