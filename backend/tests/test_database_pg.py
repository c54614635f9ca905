# =============================================================================
# GIGA WMS v1.0 - TEST SQL HELPER
# =============================================================================
# Test esecutore SQL su pool fake (vedi conftest.fake_db)
# =============================================================================

import pytest
from psycopg2 import sql as pgsql
from psycopg2.extras import RealDictCursor

from wms.database_pg import (
    REFCURSOR_OID,
    CommandType,
    OutputParam,
    execute_data_set,
    execute_data_table,
    execute_non_query,
    execute_non_query_trans,
    execute_pager,
    execute_reader,
    execute_scalar,
    normalize_page,
)


@pytest.mark.unit
class TestExecuteNonQuery:
    """Test execute_non_query."""

    def test_returns_rowcount_and_commits(self, fake_db):
        """Ritorna il rowcount e conferma la transazione."""
        fake_db.push(rowcount=3)

        affected = execute_non_query(
            "UPDATE inventory SET quantity = 0 WHERE warehouse_id = %s",
            (4,)
        )

        assert affected == 3
        assert fake_db.executed == [
            ("UPDATE inventory SET quantity = 0 WHERE warehouse_id = %s", (4,))
        ]
        assert fake_db.commits == 1
        assert fake_db.pool.returned == 1

    def test_stored_procedure_call_and_output(self, fake_db):
        """Procedura chiamata con CALL e argomenti nominali; INOUT valorizzato."""
        new_id = OutputParam()
        fake_db.push([{"p_new_id": 77}])

        execute_non_query(
            "sp_test_save",
            {"p_name": "Scaffale A", "p_new_id": new_id},
            CommandType.STORED_PROCEDURE
        )

        statement, params = fake_db.executed[0]
        assert statement == "CALL sp_test_save(p_name => %(p_name)s, p_new_id => %(p_new_id)s)"
        assert params == {"p_name": "Scaffale A", "p_new_id": None}
        assert new_id.value == 77

    def test_stored_procedure_requires_mapping(self, fake_db):
        """Parametri posizionali non ammessi per le procedure."""
        with pytest.raises(TypeError):
            execute_non_query("sp_test_save", (1, 2), CommandType.STORED_PROCEDURE)

        assert fake_db.executed == []

    def test_error_rolls_back_and_releases(self, fake_db):
        """Errore SQL: rollback, connessione restituita, eccezione rilanciata."""
        fake_db.fail_on = "missing_table"

        with pytest.raises(RuntimeError):
            execute_non_query("DELETE FROM missing_table")

        assert fake_db.rollbacks == 1
        assert fake_db.commits == 0
        assert fake_db.pool.returned == 1


@pytest.mark.unit
class TestQueries:
    """Test scalare, reader, tabella, dataset."""

    def test_execute_scalar_first_column(self, fake_db):
        """Prima colonna della prima riga."""
        fake_db.push([{"status": 2, "order_number": "OUT-1"}])

        assert execute_scalar("SELECT status, order_number FROM outbound_orders") == 2

    def test_execute_scalar_without_result(self, fake_db):
        """Nessun result set: None."""
        assert execute_scalar("UPDATE products SET is_active = TRUE") is None

    def test_execute_scalar_fills_output(self, fake_db):
        """Anche execute_scalar valorizza i parametri INOUT."""
        result = OutputParam()
        fake_db.push([{"p_result": 1}])

        value = execute_scalar("sp_test", {"p_result": result}, CommandType.STORED_PROCEDURE)

        assert value == 1
        assert result.value == 1

    def test_execute_data_table(self, fake_db):
        """Tutte le righe come dict, cursor RealDictCursor."""
        fake_db.push([
            {"product_id": 1, "product_name": "Vite M4"},
            {"product_id": 2, "product_name": "Dado M4"},
        ])

        rows = execute_data_table("SELECT product_id, product_name FROM products")

        assert rows == [
            {"product_id": 1, "product_name": "Vite M4"},
            {"product_id": 2, "product_name": "Dado M4"},
        ]
        assert fake_db.cursor_factories == [RealDictCursor]

    def test_execute_data_table_without_result(self, fake_db):
        """Statement senza result set: lista vuota."""
        assert execute_data_table("DELETE FROM inventory_logs") == []

    def test_execute_reader_closes_cursor(self, fake_db):
        """Il cursor resta aperto solo dentro il blocco with."""
        fake_db.push([{"shelf_id": 1}, {"shelf_id": 2}])

        with execute_reader("SELECT shelf_id FROM shelves") as cur:
            ids = [row["shelf_id"] for row in cur]
            assert not cur.closed

        assert ids == [1, 2]
        assert cur.closed
        assert fake_db.commits == 1

    def test_execute_data_set_single_result(self, fake_db):
        """Risultato normale: una sola tabella."""
        fake_db.push([{"warehouse_id": 1}])

        tables = execute_data_set("SELECT warehouse_id FROM warehouses")

        assert tables == [[{"warehouse_id": 1}]]

    def test_execute_data_set_refcursors(self, fake_db):
        """Ogni refcursor restituito diventa una tabella."""
        fake_db.push([{"orders": "orders_cur", "details": "details_cur"}], type_code=REFCURSOR_OID)
        fake_db.push([{"outbound_order_id": 1}, {"outbound_order_id": 2}])
        fake_db.push([{"outbound_order_detail_id": 10}])

        tables = execute_data_set("SELECT * FROM fn_outbound_overview()")

        assert tables == [
            [{"outbound_order_id": 1}, {"outbound_order_id": 2}],
            [{"outbound_order_detail_id": 10}],
        ]
        fetches = [statement for statement, _ in fake_db.executed[1:]]
        assert all(isinstance(statement, pgsql.Composed) for statement in fetches)


@pytest.mark.unit
class TestTransaction:
    """Test execute_non_query_trans."""

    def test_all_statements_in_one_transaction(self, fake_db):
        """Tutti gli statement, un solo commit."""
        assert execute_non_query_trans(
            [
                "UPDATE inventory SET quantity = quantity - %s WHERE inventory_id = %s",
                "UPDATE inventory SET quantity = quantity + %s WHERE inventory_id = %s",
            ],
            [(5, 1), (5, 2)]
        ) is True

        assert [params for _, params in fake_db.executed] == [(5, 1), (5, 2)]
        assert fake_db.commits == 1
        assert fake_db.pool.borrowed == 1

    def test_missing_params_are_none(self, fake_db):
        """Lista parametri più corta degli statement: None."""
        execute_non_query_trans(["DELETE FROM inventory_logs", "DELETE FROM inventory"], [])

        assert [params for _, params in fake_db.executed] == [None, None]

    def test_failure_rolls_back_everything(self, fake_db):
        """Un errore annulla tutto il batch."""
        fake_db.fail_on = "shelves"

        with pytest.raises(RuntimeError):
            execute_non_query_trans([
                "DELETE FROM inventory",
                "DELETE FROM shelves",
                "DELETE FROM warehouses",
            ])

        assert len(fake_db.executed) == 2
        assert fake_db.rollbacks == 1
        assert fake_db.commits == 0


@pytest.mark.unit
class TestPager:
    """Test execute_pager e normalize_page."""

    def test_positional_params(self, fake_db):
        """Conteggio + pagina, limiti accodati ai parametri posizionali."""
        fake_db.push([{"count": 23}])
        fake_db.push([{"product_id": 11, "row_num": 11}])

        rows, total = execute_pager(
            "products", "product_id", "category_id = %s", "product_id",
            page_size=10, page_index=2, params=(5,)
        )

        assert total == 23
        assert rows == [{"product_id": 11, "row_num": 11}]

        count_sql, count_params = fake_db.executed[0]
        assert count_sql == "SELECT COUNT(*) FROM products WHERE category_id = %s"
        assert count_params == (5,)

        page_sql, page_params = fake_db.executed[1]
        assert "ROW_NUMBER() OVER (ORDER BY product_id) AS row_num" in page_sql
        assert "WHERE row_num BETWEEN %s AND %s" in page_sql
        assert page_params == [5, 11, 20]

    def test_named_params(self, fake_db):
        """Con parametri dict i limiti sono parametri nominali."""
        fake_db.push([{"count": 1}])
        fake_db.push([{"product_id": 1, "row_num": 1}])

        execute_pager(
            "products", "*", "category_id = %(category)s", "product_id",
            page_size=5, page_index=1, params={"category": 5}
        )

        page_sql, page_params = fake_db.executed[1]
        assert "BETWEEN %(pager_start_row)s AND %(pager_end_row)s" in page_sql
        assert page_params == {"category": 5, "pager_start_row": 1, "pager_end_row": 5}

    def test_defaults_and_clamping(self, fake_db):
        """Pagina e dimensione non valide vengono normalizzate."""
        fake_db.push([{"count": 0}])

        rows, total = execute_pager("warehouses", where="", order_by="", page_size=0, page_index=-3)

        assert (rows, total) == ([], 0)
        assert fake_db.executed[0][0] == "SELECT COUNT(*) FROM warehouses WHERE 1=1"
        page_sql, page_params = fake_db.executed[1]
        assert "ORDER BY (SELECT NULL)" in page_sql
        assert page_params == [1, 10]

    def test_normalize_page(self):
        """Pagina minima 1, dimensione di default per valori < 1."""
        assert normalize_page(0, 0) == (1, 10)
        assert normalize_page(3, 25) == (3, 25)
        assert normalize_page(None, None) == (1, 10)
