import pytest
from pydantic import ValidationError

from core.config import Settings
from infrastructure.database import _build_async_url, server_url, target_url


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("DSN", "DATABASE_URL", "DP_NAME", "DB_NAME", "STAFF_PORT", "GRPC_PORT", "GRPC__PORT", "GRPC__HOST"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = _settings()
    assert s.DP_NAME == "staff"
    assert s.grpc_address == "0.0.0.0:50051"
    assert s.log_level == "INFO"


def test_env_aliases(monkeypatch):
    monkeypatch.setenv("DSN", "postgres://u:p@db:5432/postgres")
    monkeypatch.setenv("DP_NAME", "staffdb")
    monkeypatch.setenv("STAFF_PORT", ":6000")
    s = _settings()
    assert s.DSN == "postgres://u:p@db:5432/postgres"
    assert s.DP_NAME == "staffdb"
    assert s.grpc_address == "0.0.0.0:6000"


def test_grpc_port_alias_and_nested(monkeypatch):
    monkeypatch.setenv("GRPC__HOST", "127.0.0.1")
    monkeypatch.setenv("GRPC__PORT", "7000")
    assert _settings().grpc_address == "127.0.0.1:7000"

    monkeypatch.setenv("GRPC_PORT", "7001")
    assert _settings().grpc_address == "127.0.0.1:7001"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("50052", "0.0.0.0:50052"),
        (":50052", "0.0.0.0:50052"),
        ("localhost:50052", "localhost:50052"),
        ("", "0.0.0.0:50051"),
    ],
)
def test_listen_address_forms(monkeypatch, raw, expected):
    monkeypatch.setenv("STAFF_PORT", raw)
    assert _settings().grpc_address == expected


def test_empty_db_name_rejected(monkeypatch):
    monkeypatch.setenv("DP_NAME", "  ")
    with pytest.raises(ValidationError):
        _settings()


def test_async_driver_and_sslmode():
    url = _build_async_url("postgres://u:p@db:5432/postgres?sslmode=disable")
    assert url.drivername == "postgresql+asyncpg"
    assert "sslmode" not in url.query
    assert url.query["ssl"] == "disable"


def test_unsupported_driver():
    with pytest.raises(ValueError):
        _build_async_url("mysql://u:p@db/x")


def test_server_and_target_urls():
    s = _settings(DSN="postgresql://u:p@db:5432", DP_NAME="staff")
    assert server_url(s).database == "postgres"
    assert target_url(s).database == "staff"
    assert target_url(s).host == "db"


def test_sqlite_target_is_the_file(tmp_path):
    s = _settings(DSN=f"sqlite:///{tmp_path / 'x.db'}", DP_NAME="staff")
    url = target_url(s)
    assert url.drivername == "sqlite+aiosqlite"
    assert url.database.endswith("x.db")
