# =============================================================================
# GIGA WMS v1.0 - TEST DETTAGLI ORDINI DI USCITA
# =============================================================================
# Test servizio dettagli: guardie, procedura di salvataggio, lista paginata.
# Le funzioni SQL sono sostituite nel modulo del servizio.
# =============================================================================

from datetime import date
from decimal import Decimal

import pytest

import wms.services.outbound.details as details_service
from wms.database_pg import CommandType
from wms.services.outbound import (
    delete_outbound_order_detail,
    get_outbound_order_detail_list,
    get_outbound_order_id_by_detail_id,
    is_outbound_order_approved,
    save_outbound_order_detail,
)

from factories import OutboundDetailRowFactory


def scalar_stub(order_id=1, status=1):
    """execute_scalar fake: ordine del dettaglio e stato dell'ordine."""
    def fake(sql, params=None, command_type=CommandType.TEXT):
        if "FROM outbound_order_details" in sql:
            return order_id
        if "FROM outbound_orders" in sql:
            return status
        raise AssertionError(f"SQL inatteso: {sql}")
    return fake


class ProcedureRecorder:
    """execute_non_query fake che registra le chiamate."""

    def __init__(self, new_id=None, rowcount=1, error=None):
        self.new_id = new_id
        self.rowcount = rowcount
        self.error = error
        self.calls = []

    def __call__(self, cmd_text, params=None, command_type=CommandType.TEXT):
        self.calls.append((cmd_text, params, command_type))
        if self.error:
            raise self.error
        if self.new_id is not None and isinstance(params, dict):
            params["p_new_outbound_order_detail_id"].value = self.new_id
        return self.rowcount


@pytest.fixture
def procedure(monkeypatch):
    recorder = ProcedureRecorder(new_id=42)
    monkeypatch.setattr(details_service, "execute_non_query", recorder)
    monkeypatch.setattr(details_service, "execute_scalar", scalar_stub())
    return recorder


def _save(**overrides):
    values = dict(
        outbound_order_detail_id=0,
        outbound_order_id=1,
        product_id=7,
        quantity=Decimal("5"),
        unit_price=Decimal("2.50"),
        batch_number="L0001",
        expiry_date=date(2027, 1, 31),
        remark="urgente",
    )
    values.update(overrides)
    return save_outbound_order_detail(**values)


@pytest.mark.unit
class TestApprovalHelpers:
    """Test helper ordine/approvazione."""

    def test_order_id_by_detail(self, monkeypatch):
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub(order_id=9))
        assert get_outbound_order_id_by_detail_id(100) == 9

    def test_order_id_missing_detail(self, monkeypatch):
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub(order_id=None))
        assert get_outbound_order_id_by_detail_id(100) == 0

    @pytest.mark.parametrize("status,expected", [(2, True), (1, False), (None, False)])
    def test_is_approved(self, monkeypatch, status, expected):
        """Approvato solo con stato 2; ordine mancante non approvato."""
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub(status=status))
        assert is_outbound_order_approved(1) is expected


@pytest.mark.unit
class TestSaveDetail:
    """Test salvataggio dettaglio."""

    def test_insert_new_detail(self, procedure, read_log):
        """Nuovo dettaglio: procedura chiamata, ID restituito, operazione loggata."""
        response = _save()

        assert response == {
            "success": True,
            "message": "Dettaglio ordine di uscita salvato",
            "outbound_order_detail_id": 42,
        }

        cmd_text, params, command_type = procedure.calls[0]
        assert cmd_text == "sp_outbound_order_details_save"
        assert command_type == CommandType.STORED_PROCEDURE
        assert params["p_outbound_order_detail_id"] == 0
        assert params["p_product_id"] == 7
        assert params["p_quantity"] == Decimal("5")
        assert params["p_expiry_date"] == date(2027, 1, 31)
        assert params["p_remark"] == "urgente"

        assert "SALVA_DETTAGLIO_USCITA" in read_log()

    @pytest.mark.parametrize("overrides,message", [
        ({"outbound_order_id": 0}, "ID ordine di uscita non valido"),
        ({"product_id": -1}, "ID prodotto non valido"),
        ({"quantity": Decimal("0")}, "La quantità deve essere maggiore di 0"),
    ])
    def test_guards(self, procedure, overrides, message):
        """Input non valido: envelope di errore, nessuna procedura."""
        response = _save(**overrides)

        assert response == {"success": False, "message": message, "outbound_order_detail_id": 0}
        assert procedure.calls == []

    def test_approved_order(self, procedure, monkeypatch, read_log):
        """Ordine approvato: dettagli non modificabili."""
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub(status=2))

        response = _save()

        assert response["success"] is False
        assert response["message"] == "Ordine di uscita già approvato, impossibile modificare i dettagli"
        assert procedure.calls == []
        assert "[WARN] [Ordini uscita]" in read_log()
        assert "[OUTBOUND_ORDER_APPROVED]" in read_log()

    def test_update_detail_same_order(self, procedure, monkeypatch):
        """Aggiornamento nel proprio ordine: procedura chiamata con lo stesso ordine."""
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub(order_id=1, status=1))

        response = _save(outbound_order_detail_id=100, outbound_order_id=1)

        assert response["success"] is True
        _, params, _ = procedure.calls[0]
        assert params["p_outbound_order_detail_id"] == 100
        assert params["p_outbound_order_id"] == 1

    def test_detail_of_approved_order_not_moved(self, procedure, monkeypatch, read_log):
        """Dettaglio di un ordine approvato non spostabile su un ordine in bozza."""
        def fake(sql, params=None, command_type=CommandType.TEXT):
            if "FROM outbound_order_details" in sql:
                return 5
            # ordine 5 approvato, ordine 1 in bozza
            return 2 if params == (5,) else 1

        monkeypatch.setattr(details_service, "execute_scalar", fake)

        response = _save(outbound_order_detail_id=100, outbound_order_id=1, quantity=Decimal("999"))

        assert response == {
            "success": False,
            "message": "Il dettaglio non appartiene all'ordine di uscita indicato",
            "outbound_order_detail_id": 0,
        }
        assert procedure.calls == []
        assert "[VALIDATION_ERROR]" in read_log()

    def test_update_missing_detail(self, procedure, monkeypatch):
        """Dettaglio inesistente: non trovato, nessuna procedura."""
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub(order_id=None))

        response = _save(outbound_order_detail_id=100)

        assert response == {
            "success": False,
            "message": "Dettaglio da modificare non trovato",
            "outbound_order_detail_id": 0,
        }
        assert procedure.calls == []

    def test_database_error(self, monkeypatch, read_error_log):
        """Errore DB: messaggio con prefisso e blocco nel log errori."""
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub())
        monkeypatch.setattr(
            details_service, "execute_non_query",
            ProcedureRecorder(error=RuntimeError("connessione persa"))
        )

        response = _save()

        assert response == {
            "success": False,
            "message": "Salvataggio dettaglio ordine di uscita fallito: connessione persa",
            "outbound_order_detail_id": 0,
        }
        assert "Messaggio eccezione: connessione persa" in read_error_log()


@pytest.mark.unit
class TestDeleteDetail:
    """Test eliminazione dettaglio."""

    def test_delete(self, procedure, read_log):
        response = delete_outbound_order_detail(100)

        assert response == {"success": True, "message": "Dettaglio eliminato"}
        cmd_text, params, _ = procedure.calls[0]
        assert cmd_text.startswith("DELETE FROM outbound_order_details")
        assert params == (100,)
        assert "ELIMINA_DETTAGLIO_USCITA" in read_log()

    def test_invalid_id(self, procedure):
        response = delete_outbound_order_detail(0)

        assert response == {"success": False, "message": "ID dettaglio ordine di uscita non valido"}

    def test_detail_not_found(self, procedure, monkeypatch):
        """Dettaglio senza ordine: non trovato."""
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub(order_id=None))

        response = delete_outbound_order_detail(100)

        assert response == {"success": False, "message": "Dettaglio da eliminare non trovato"}
        assert procedure.calls == []

    def test_approved_order(self, procedure, monkeypatch):
        monkeypatch.setattr(details_service, "execute_scalar", scalar_stub(status=2))

        response = delete_outbound_order_detail(100)

        assert response == {
            "success": False,
            "message": "Ordine di uscita già approvato, impossibile eliminare i dettagli",
        }
        assert procedure.calls == []

    def test_nothing_deleted(self, procedure):
        """DELETE senza righe: non trovato."""
        procedure.rowcount = 0

        response = delete_outbound_order_detail(100)

        assert response["message"] == "Dettaglio da eliminare non trovato"


@pytest.mark.unit
class TestDetailList:
    """Test lista paginata dettagli."""

    def test_list(self, monkeypatch):
        """Righe mappate sui record con nome e codice prodotto."""
        rows = OutboundDetailRowFactory.create_batch(2, outbound_order_id=3, remark=None)
        calls = []

        def fake_pager(*args):
            calls.append(args)
            return rows, 12

        monkeypatch.setattr(details_service, "execute_pager", fake_pager)

        response = get_outbound_order_detail_list(3, page_index=2, page_size=2)

        assert response["success"] is True
        assert response["total"] == 12
        assert len(response["data"]) == 2

        record = response["data"][0]
        assert record["outbound_order_id"] == 3
        assert record["product_name"] == rows[0]["product_name"]
        assert record["quantity"] == Decimal("12.0000")
        assert record["remark"] == ""
        assert "row_num" not in record

        _, _, where, order_by, page_size, page_index, params = calls[0]
        assert where == "d.outbound_order_id = %s"
        assert order_by == "d.outbound_order_detail_id"
        assert (page_size, page_index, params) == (2, 2, (3,))

    def test_invalid_order(self, monkeypatch):
        monkeypatch.setattr(details_service, "execute_pager", lambda *args: pytest.fail("pager chiamato"))

        response = get_outbound_order_detail_list(0)

        assert response == {
            "success": False,
            "message": "ID ordine di uscita non valido",
            "total": 0,
            "data": [],
        }

    def test_database_error(self, monkeypatch):
        def broken(*args):
            raise RuntimeError("timeout")

        monkeypatch.setattr(details_service, "execute_pager", broken)

        response = get_outbound_order_detail_list(3)

        assert response["success"] is False
        assert response["message"] == "Lettura dettagli ordine di uscita fallita: timeout"
        assert response["data"] == []
