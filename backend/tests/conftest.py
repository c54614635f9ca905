# =============================================================================
# GIGA WMS v1.0 - TEST CONFIGURATION
# =============================================================================
# Global fixtures e configurazioni per pytest.
# Nessun database reale: il pool psycopg2 viene sostituito da un fake che
# registra gli statement e restituisce risultati preparati dal test.
# =============================================================================

from datetime import date
from types import SimpleNamespace
from typing import Any, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient

from wms import database_pg
from wms.config import config
from wms.log_helper import configure_logging
from wms.main import app


# =============================================================================
# FAKE DATABASE
# =============================================================================

_NO_RESULT = {"rows": [], "description": None, "rowcount": -1}


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self.conn = conn
        self.description = None
        self.rowcount = -1
        self._rows: List[Dict[str, Any]] = []
        self.closed = False

    def execute(self, statement, params=None):
        self.conn.executed.append((statement, params))
        if self.conn.fail_on and self.conn.fail_on in str(statement):
            raise RuntimeError(f"errore su: {self.conn.fail_on}")
        prepared = self.conn.results.pop(0) if self.conn.results else _NO_RESULT
        self.description = prepared["description"]
        self.rowcount = prepared["rowcount"]
        self._rows = list(prepared["rows"])

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def __iter__(self):
        return iter(self.fetchall())

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class FakeConnection:
    def __init__(self):
        self.executed: List[tuple] = []
        self.results: List[Dict[str, Any]] = []
        self.fail_on = None
        self.commits = 0
        self.rollbacks = 0
        self.cursor_factories = []

    def push(self, rows: List[Dict[str, Any]] = None, rowcount: int = None, type_code: int = 25):
        """
        Prepara il risultato del prossimo execute().

        Senza righe simula uno statement senza result set (INSERT/UPDATE/DELETE).
        type_code vale per tutte le colonne (25 = text, 1790 = refcursor).
        """
        rows = rows or []
        columns = [SimpleNamespace(name=name, type_code=type_code) for name in rows[0]] if rows else None
        self.results.append({
            "rows": rows,
            "description": columns,
            "rowcount": len(rows) if rowcount is None else rowcount,
        })
        return self

    def cursor(self, cursor_factory=None):
        self.cursor_factories.append(cursor_factory)
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


class FakePool:
    def __init__(self, conn: FakeConnection):
        self.conn = conn
        self.borrowed = 0
        self.returned = 0

    def getconn(self):
        self.borrowed += 1
        return self.conn

    def putconn(self, conn):
        self.returned += 1

    def closeall(self):
        pass


@pytest.fixture
def fake_db(monkeypatch) -> FakeConnection:
    """Sostituisce il pool con un fake; ritorna la connessione fake."""
    conn = FakeConnection()
    fake_pool = FakePool(conn)
    conn.pool = fake_pool
    monkeypatch.setattr(database_pg, "_pool", fake_pool)
    return conn


# =============================================================================
# LOG FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def log_dir(tmp_path, monkeypatch):
    """
    Log su directory temporanea per ogni test.
    Log operazioni ed errori attivi, debug disattivato.
    """
    path = tmp_path / "logs"
    monkeypatch.setattr(config, "LOG_PATH", str(path))
    monkeypatch.setattr(config, "ENABLE_DEBUG_LOG", False)
    monkeypatch.setattr(config, "ENABLE_ERROR_LOG", True)
    monkeypatch.setattr(config, "ENABLE_OPERATION_LOG", True)
    configure_logging(str(path))
    return path


def _read(path) -> str:
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


@pytest.fixture
def read_log(log_dir):
    """Contenuto del log operazioni di oggi."""
    return lambda: _read(log_dir / f"{date.today():%Y-%m-%d}.log")


@pytest.fixture
def read_error_log(log_dir):
    """Contenuto del log errori di oggi."""
    return lambda: _read(log_dir / f"{date.today():%Y-%m-%d}_error.log")


# =============================================================================
# CLIENT FIXTURES
# =============================================================================

@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    TestClient senza lifespan (nessun pool, nessuno scheduler).
    Le eccezioni non gestite arrivano all'handler globale.
    """
    c = TestClient(app, raise_server_exceptions=False)
    yield c


# =============================================================================
# MARKER CONFIGURATION
# =============================================================================

def pytest_configure(config):
    """
    Configura marker personalizzati.
    """
    config.addinivalue_line(
        "markers", "slow: test che richiedono più tempo"
    )
    config.addinivalue_line(
        "markers", "integration: test di integrazione (richiedono DB)"
    )
    config.addinivalue_line(
        "markers", "unit: test unitari isolati"
    )
