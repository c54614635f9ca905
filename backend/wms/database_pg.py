# =============================================================================
# GIGA WMS v1.0 - SQL HELPER (PostgreSQL)
# =============================================================================
# Esecutore generico di comandi parametrizzati sopra psycopg2:
# non-query, scalare, reader, tabella, dataset, batch transazionale, pager.
# Nessun retry e nessuna cache: apri, esegui, commit/rollback, rilascia.
# =============================================================================

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from psycopg2 import pool
from psycopg2 import sql as pgsql
from psycopg2.extras import RealDictCursor

from .config import config


logger = logging.getLogger(__name__)

# OID del tipo refcursor in PostgreSQL (pg_type)
REFCURSOR_OID = 1790

Params = Optional[Union[Sequence[Any], Mapping[str, Any]]]


# =============================================================================
# CONNECTION POOL
# =============================================================================

_pool: Optional[pool.ThreadedConnectionPool] = None


def init_pool():
    """Inizializza il connection pool PostgreSQL."""
    global _pool
    if _pool is not None:
        return

    _pool = pool.ThreadedConnectionPool(
        minconn=config.PG_POOL_MIN,
        maxconn=config.PG_POOL_MAX,
        host=config.PG_HOST,
        port=config.PG_PORT,
        database=config.PG_DATABASE,
        user=config.PG_USER,
        password=config.PG_PASSWORD
    )
    logger.info("PostgreSQL pool: %s:%s/%s", config.PG_HOST, config.PG_PORT, config.PG_DATABASE)


def close_pool():
    """Chiude il connection pool."""
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None


def _get_pool() -> pool.ThreadedConnectionPool:
    if _pool is None:
        init_pool()
    return _pool


@contextmanager
def get_connection():
    """
    Connessione dal pool con commit/rollback automatico.

    Commit se il blocco termina senza errori, rollback e rilancio
    dell'eccezione altrimenti. La connessione torna sempre al pool.
    """
    db_pool = _get_pool()
    conn = db_pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        db_pool.putconn(conn)


# =============================================================================
# COMANDI E PARAMETRI
# =============================================================================

class CommandType(str, Enum):
    """Tipo di comando: testo SQL o nome di stored procedure."""
    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"


class OutputParam:
    """
    Parametro INOUT di una stored procedure.

    Viene legato con il valore iniziale (NULL di default); dopo l'esecuzione
    `value` contiene il valore restituito dalla procedura.
    """

    def __init__(self, value: Any = None):
        self.value = value

    def __repr__(self) -> str:
        return f"OutputParam(value={self.value!r})"


def _build_command(
    cmd_text: str,
    params: Params,
    command_type: CommandType
) -> Tuple[str, Params, Dict[str, OutputParam]]:
    """
    Prepara SQL, parametri legati e parametri di output.

    Per le stored procedure genera `CALL nome(p1 => %(p1)s, ...)`.
    """
    if command_type != CommandType.STORED_PROCEDURE:
        return cmd_text, params, {}

    if params is None:
        params = {}
    if not isinstance(params, Mapping):
        raise TypeError("I parametri di una stored procedure devono essere un dict nome -> valore")

    bound: Dict[str, Any] = {}
    outputs: Dict[str, OutputParam] = {}
    for name, value in params.items():
        if isinstance(value, OutputParam):
            outputs[name] = value
            bound[name] = value.value
        else:
            bound[name] = value

    args = ", ".join(f"{name} => %({name})s" for name in bound)
    return f"CALL {cmd_text}({args})", bound, outputs


def _run(cursor, statement: str, params: Params) -> None:
    if params is None:
        cursor.execute(statement)
    else:
        cursor.execute(statement, params)


def _collect_outputs(cursor, outputs: Dict[str, OutputParam]) -> None:
    """Valorizza i parametri di output dalla riga restituita da CALL."""
    if not outputs or cursor.description is None:
        return
    row = cursor.fetchone()
    if row is None:
        return
    for name, param in outputs.items():
        if name in row:
            param.value = row[name]


def _first_value(row) -> Any:
    if row is None:
        return None
    return next(iter(row.values()), None)


# =============================================================================
# ESECUZIONE
# =============================================================================

def execute_non_query(
    cmd_text: str,
    params: Params = None,
    command_type: CommandType = CommandType.TEXT
) -> int:
    """
    Esegue SQL o stored procedure e ritorna il numero di righe coinvolte.

    Args:
        cmd_text: Testo SQL o nome della procedura
        params: Tupla/lista (%s) o dict (%(nome)s); per le procedure dict
        command_type: CommandType.TEXT o CommandType.STORED_PROCEDURE

    Returns:
        rowcount del driver
    """
    statement, bound, outputs = _build_command(cmd_text, params, command_type)
    with get_connection() as conn:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            _run(cur, statement, bound)
            rowcount = cur.rowcount
            _collect_outputs(cur, outputs)
            return rowcount


def execute_scalar(
    cmd_text: str,
    params: Params = None,
    command_type: CommandType = CommandType.TEXT
) -> Any:
    """Ritorna la prima colonna della prima riga (None se nessuna riga)."""
    statement, bound, outputs = _build_command(cmd_text, params, command_type)
    with get_connection() as conn:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            _run(cur, statement, bound)
            if cur.description is None:
                return None
            row = cur.fetchone()
            for name, param in outputs.items():
                if row is not None and name in row:
                    param.value = row[name]
            return _first_value(row)


@contextmanager
def execute_reader(
    cmd_text: str,
    params: Params = None,
    command_type: CommandType = CommandType.TEXT
) -> Iterator[RealDictCursor]:
    """
    Esegue il comando e restituisce un cursor aperto (righe come dict).

    La connessione resta occupata finché il blocco `with` non termina.

    Esempio:
        with execute_reader("SELECT * FROM products") as cur:
            for row in cur:
                ...
    """
    statement, bound, _ = _build_command(cmd_text, params, command_type)
    with get_connection() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        try:
            _run(cur, statement, bound)
            yield cur
        finally:
            cur.close()


def execute_data_table(
    cmd_text: str,
    params: Params = None,
    command_type: CommandType = CommandType.TEXT
) -> List[Dict[str, Any]]:
    """Ritorna tutte le righe del risultato come lista di dict."""
    statement, bound, _ = _build_command(cmd_text, params, command_type)
    with get_connection() as conn:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            _run(cur, statement, bound)
            if cur.description is None:
                return []
            return [dict(row) for row in cur.fetchall()]


def _is_refcursor_result(description) -> bool:
    return bool(description) and all(col.type_code == REFCURSOR_OID for col in description)


def execute_data_set(
    cmd_text: str,
    params: Params = None,
    command_type: CommandType = CommandType.TEXT
) -> List[List[Dict[str, Any]]]:
    """
    Ritorna più result set (una lista di tabelle).

    Se il comando restituisce refcursor, ogni refcursor viene letto come una
    tabella, nell'ordine in cui compare; altrimenti l'unico risultato è
    l'unica tabella.
    """
    statement, bound, _ = _build_command(cmd_text, params, command_type)
    with get_connection() as conn:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            _run(cur, statement, bound)
            if cur.description is None:
                return []

            rows = cur.fetchall()
            if not _is_refcursor_result(cur.description):
                return [[dict(row) for row in rows]]

            portals = [value for row in rows for value in row.values() if value]
            tables = []
            for portal in portals:
                cur.execute(pgsql.SQL("FETCH ALL FROM {}").format(pgsql.Identifier(portal)))
                tables.append([dict(row) for row in cur.fetchall()])
            return tables


def execute_non_query_trans(
    sql_list: Sequence[str],
    params_list: Optional[Sequence[Params]] = None
) -> bool:
    """
    Esegue una lista di statement in un'unica transazione.

    Args:
        sql_list: Statement SQL da eseguire in ordine
        params_list: Parametri per statement (stesso indice, None = nessuno)

    Returns:
        True se tutti gli statement sono stati confermati

    Raises:
        L'eccezione del primo statement fallito, dopo il rollback
    """
    with get_connection() as conn:
        with conn.cursor() as cur:
            for i, statement in enumerate(sql_list):
                params = None
                if params_list is not None and i < len(params_list):
                    params = params_list[i]
                _run(cur, statement, params)
    return True


# =============================================================================
# PAGINAZIONE
# =============================================================================

def normalize_page(page_index: int, page_size: int) -> Tuple[int, int]:
    """Pagina < 1 diventa 1, dimensione < 1 diventa quella di default."""
    if page_index is None or page_index < 1:
        page_index = 1
    if page_size is None or page_size < 1:
        page_size = config.DEFAULT_PAGE_SIZE
    return page_index, page_size


def execute_pager(
    table_name: str,
    fields: str = "*",
    where: str = "1=1",
    order_by: str = "(SELECT NULL)",
    page_size: int = config.DEFAULT_PAGE_SIZE,
    page_index: int = 1,
    params: Params = None
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Query paginata con ROW_NUMBER() su una CTE.

    `table_name` può essere anche un'espressione di join. Tabella, campi,
    condizione e ordinamento sono testo SQL; i valori vanno sempre passati
    in `params` (stesso stile di placeholder della condizione).

    Returns:
        Tupla (righe della pagina, totale record)
    """
    fields = fields or "*"
    where = where or "1=1"
    order_by = order_by or "(SELECT NULL)"
    page_index, page_size = normalize_page(page_index, page_size)

    start_row = (page_index - 1) * page_size + 1
    end_row = page_index * page_size

    count_sql = f"SELECT COUNT(*) FROM {table_name} WHERE {where}"
    record_count = int(execute_scalar(count_sql, params) or 0)

    if isinstance(params, Mapping):
        bounds = "%(pager_start_row)s AND %(pager_end_row)s"
        page_params: Params = {**params, "pager_start_row": start_row, "pager_end_row": end_row}
    else:
        bounds = "%s AND %s"
        page_params = list(params or []) + [start_row, end_row]

    page_sql = f"""
        WITH paged_data AS (
            SELECT {fields}, ROW_NUMBER() OVER (ORDER BY {order_by}) AS row_num
            FROM {table_name}
            WHERE {where}
        )
        SELECT * FROM paged_data
        WHERE row_num BETWEEN {bounds}
        ORDER BY row_num
    """
    rows = execute_data_table(page_sql, page_params)
    return rows, record_count


# =============================================================================
# UTILITA
# =============================================================================

def check_connection() -> bool:
    """Verifica che il database risponda."""
    return execute_scalar("SELECT 1") == 1
