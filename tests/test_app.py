from holdaspot import main
from holdaspot.core.config import settings


async def test_lifespan_creates_tables(monkeypatch):
    calls = []

    async def fake_init_db():
        calls.append("init_db")

    monkeypatch.setattr(main, "init_db", fake_init_db)

    async with main.lifespan(main.app):
        assert calls == ["init_db"]


def test_run_serves_on_configured_address(monkeypatch):
    served = {}

    def fake_run(app, **kwargs):
        served["app"] = app
        served.update(kwargs)

    monkeypatch.setattr(main.uvicorn, "run", fake_run)
    monkeypatch.setattr(settings, "HOST", "127.0.0.1")
    monkeypatch.setattr(settings, "PORT", 9001)

    main.run()

    assert served["app"] == "holdaspot.main:app"
    assert served["host"] == "127.0.0.1"
    assert served["port"] == 9001
