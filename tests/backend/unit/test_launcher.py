import pytest

from giftexchange.cli import launcher


@pytest.fixture(autouse=True)
def _offline_settings(monkeypatch) -> None:
    monkeypatch.setenv("GIFTEXCHANGE_REMOTE_URL", "")
    monkeypatch.delenv("GIFTEXCHANGE_DATABASE_URL", raising=False)
    monkeypatch.setenv("GIFTEXCHANGE_PUBLIC_URL", "http://gifts.test/")


def test_parse_args_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        launcher.parse_args([])


def test_create_prints_local_warning_and_links(capsys) -> None:
    code = launcher.main(["create", "Ann", "Bo", "Cy"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Event: local_" in out
    assert "Stored locally only" in out
    for name in ("Ann", "Bo", "Cy"):
        assert f"{name}: http://gifts.test/?event=local_" in out


def test_create_rejects_duplicate_names(capsys) -> None:
    code = launcher.main(["create", "Ann", "Ann", "Bo"])

    assert code == 1
    assert "unique" in capsys.readouterr().err


def test_show_unknown_event_fails(capsys) -> None:
    code = launcher.main(["show", "--event", "local_missing"])

    assert code == 1
    assert "Event not found" in capsys.readouterr().err


def test_migrate_without_database_url_fails(capsys) -> None:
    code = launcher.main(["migrate"])

    assert code == 1
    assert "GIFTEXCHANGE_DATABASE_URL is required" in capsys.readouterr().err


def test_migrate_reports_database_errors(monkeypatch, capsys) -> None:
    psycopg = pytest.importorskip("psycopg")

    def refuse(*args, **kwargs):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setenv("GIFTEXCHANGE_DATABASE_URL", "postgresql://nowhere/gifts")
    monkeypatch.setattr(psycopg, "connect", refuse)

    code = launcher.main(["migrate"])

    assert code == 1
    assert "Schema migration failed: connection refused" in capsys.readouterr().err
