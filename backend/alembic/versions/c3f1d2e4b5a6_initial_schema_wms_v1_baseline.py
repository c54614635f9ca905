"""initial_schema_wms_v1_baseline

Revision ID: c3f1d2e4b5a6
Revises:
Create Date: 2026-10-19 09:12:44.208113

BASELINE MIGRATION for GIGA WMS v1.0

For existing databases, this will be stamped without execution.
For new databases, it will create the full schema.

Tables: 7 | Procedures: 3 | Indexes: 7
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import text


# revision identifiers, used by Alembic.
revision: str = 'c3f1d2e4b5a6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    conn = op.get_bind()
    result = conn.execute(text(
        "SELECT EXISTS (SELECT 1 FROM information_schema.tables WHERE table_name = :name)"
    ), {"name": table_name})
    return result.scalar()


def upgrade() -> None:
    """
    Create initial schema if database is empty.
    Skip if tables already exist (baseline for existing DBs).
    """
    if table_exists('outbound_order_details'):
        print("  Schema already exists - baseline migration (no changes)")
        return

    print("  Creating initial schema WMS v1.0...")
    conn = op.get_bind()

    # =========================================================================
    # ANAGRAFICHE
    # =========================================================================

    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS products (
            product_id SERIAL PRIMARY KEY,
            product_code VARCHAR(50) NOT NULL UNIQUE,
            product_name VARCHAR(200) NOT NULL,
            unit VARCHAR(20),
            is_active BOOLEAN DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """))

    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS warehouses (
            warehouse_id SERIAL PRIMARY KEY,
            warehouse_code VARCHAR(50) NOT NULL UNIQUE,
            warehouse_name VARCHAR(200) NOT NULL,
            address VARCHAR(500),
            is_active BOOLEAN DEFAULT TRUE
        )
    """))

    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS shelves (
            shelf_id SERIAL PRIMARY KEY,
            warehouse_id INTEGER NOT NULL REFERENCES warehouses(warehouse_id),
            shelf_code VARCHAR(50) NOT NULL,
            shelf_name VARCHAR(200) NOT NULL,
            is_active BOOLEAN DEFAULT TRUE,
            UNIQUE (warehouse_id, shelf_code)
        )
    """))

    # =========================================================================
    # ORDINI DI USCITA
    # =========================================================================

    # status: 1 = bozza, 2 = approvato
    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS outbound_orders (
            outbound_order_id SERIAL PRIMARY KEY,
            order_number VARCHAR(50) NOT NULL UNIQUE,
            warehouse_id INTEGER NOT NULL REFERENCES warehouses(warehouse_id),
            customer_name VARCHAR(200),
            status SMALLINT NOT NULL DEFAULT 1,
            order_date DATE DEFAULT CURRENT_DATE,
            remark VARCHAR(500),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            approved_at TIMESTAMP
        )
    """))

    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS outbound_order_details (
            outbound_order_detail_id SERIAL PRIMARY KEY,
            outbound_order_id INTEGER NOT NULL REFERENCES outbound_orders(outbound_order_id) ON DELETE CASCADE,
            product_id INTEGER NOT NULL REFERENCES products(product_id),
            quantity NUMERIC(18, 4) NOT NULL CHECK (quantity > 0),
            unit_price NUMERIC(18, 4) NOT NULL DEFAULT 0,
            batch_number VARCHAR(50),
            expiry_date DATE,
            remark VARCHAR(500),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP
        )
    """))

    # =========================================================================
    # INVENTARIO
    # =========================================================================

    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS inventory (
            inventory_id SERIAL PRIMARY KEY,
            warehouse_id INTEGER NOT NULL REFERENCES warehouses(warehouse_id),
            product_id INTEGER NOT NULL REFERENCES products(product_id),
            shelf_id INTEGER NOT NULL REFERENCES shelves(shelf_id),
            quantity NUMERIC(18, 4) NOT NULL DEFAULT 0 CHECK (quantity >= 0),
            batch_number VARCHAR(50),
            expiry_date DATE,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """))

    # Una sola riga di giacenza per ubicazione (lotto e scadenza NULL inclusi)
    conn.execute(text("""
        CREATE UNIQUE INDEX IF NOT EXISTS uq_inventory_location ON inventory (
            warehouse_id, product_id, shelf_id,
            COALESCE(batch_number, ''),
            COALESCE(expiry_date, CAST('-infinity' AS DATE))
        )
    """))

    # operation_type: 1 carico, 2 scarico, 3 rettifica
    # source_type: 1 ordine entrata, 2 ordine uscita, 3 inventario fisico
    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS inventory_logs (
            inventory_log_id SERIAL PRIMARY KEY,
            warehouse_id INTEGER NOT NULL REFERENCES warehouses(warehouse_id),
            product_id INTEGER NOT NULL REFERENCES products(product_id),
            shelf_id INTEGER NOT NULL REFERENCES shelves(shelf_id),
            quantity NUMERIC(18, 4) NOT NULL,
            operation_type SMALLINT NOT NULL,
            source_id INTEGER NOT NULL DEFAULT 0,
            source_type SMALLINT NOT NULL,
            batch_number VARCHAR(50),
            expiry_date DATE,
            remark VARCHAR(500),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """))

    # =========================================================================
    # STORED PROCEDURES
    # =========================================================================

    # Inserimento (id = 0) o aggiornamento dettaglio; rifiuta ordini approvati
    conn.execute(text("""
        CREATE OR REPLACE PROCEDURE sp_outbound_order_details_save(
            p_outbound_order_detail_id INTEGER,
            p_outbound_order_id INTEGER,
            p_product_id INTEGER,
            p_quantity NUMERIC,
            p_unit_price NUMERIC,
            p_batch_number VARCHAR,
            p_expiry_date DATE,
            p_remark VARCHAR,
            INOUT p_new_outbound_order_detail_id INTEGER
        )
        LANGUAGE plpgsql
        AS $$
        DECLARE
            v_status SMALLINT;
            v_current_order_id INTEGER;
        BEGIN
            IF p_outbound_order_detail_id <> 0 THEN
                SELECT d.outbound_order_id INTO v_current_order_id
                FROM outbound_order_details d
                WHERE d.outbound_order_detail_id = p_outbound_order_detail_id;

                IF v_current_order_id IS NULL THEN
                    RAISE EXCEPTION 'outbound order detail % not found', p_outbound_order_detail_id;
                END IF;
                IF v_current_order_id <> p_outbound_order_id THEN
                    RAISE EXCEPTION 'outbound order detail % belongs to order %',
                        p_outbound_order_detail_id, v_current_order_id;
                END IF;
            END IF;

            SELECT status INTO v_status
            FROM outbound_orders
            WHERE outbound_order_id = p_outbound_order_id
            FOR UPDATE;

            IF v_status = 2 THEN
                RAISE EXCEPTION 'outbound order % already approved', p_outbound_order_id;
            END IF;

            IF p_outbound_order_detail_id = 0 THEN
                INSERT INTO outbound_order_details (
                    outbound_order_id, product_id, quantity, unit_price,
                    batch_number, expiry_date, remark
                ) VALUES (
                    p_outbound_order_id, p_product_id, p_quantity, COALESCE(p_unit_price, 0),
                    p_batch_number, p_expiry_date, p_remark
                )
                RETURNING outbound_order_detail_id INTO p_new_outbound_order_detail_id;
            ELSE
                UPDATE outbound_order_details SET
                    product_id = p_product_id,
                    quantity = p_quantity,
                    unit_price = COALESCE(p_unit_price, 0),
                    batch_number = p_batch_number,
                    expiry_date = p_expiry_date,
                    remark = p_remark,
                    updated_at = CURRENT_TIMESTAMP
                WHERE outbound_order_detail_id = p_outbound_order_detail_id
                  AND outbound_order_id = p_outbound_order_id;

                IF FOUND THEN
                    p_new_outbound_order_detail_id := p_outbound_order_detail_id;
                ELSE
                    p_new_outbound_order_detail_id := 0;
                END IF;
            END IF;
        END;
        $$
    """))

    # Variazione giacenza: p_result 1 = ok, -1 = giacenza insufficiente
    conn.execute(text("""
        CREATE OR REPLACE PROCEDURE sp_inventory_update(
            p_warehouse_id INTEGER,
            p_product_id INTEGER,
            p_shelf_id INTEGER,
            p_quantity NUMERIC,
            p_batch_number VARCHAR,
            p_expiry_date DATE,
            INOUT p_result INTEGER
        )
        LANGUAGE plpgsql
        AS $$
        DECLARE
            v_inventory_id INTEGER;
            v_quantity NUMERIC;
        BEGIN
            -- Lotto vuoto equivale a nessun lotto
            p_batch_number := NULLIF(p_batch_number, '');

            -- Carico: upsert atomico sull'indice uq_inventory_location
            IF p_quantity >= 0 THEN
                INSERT INTO inventory (
                    warehouse_id, product_id, shelf_id, quantity, batch_number, expiry_date
                ) VALUES (
                    p_warehouse_id, p_product_id, p_shelf_id, p_quantity, p_batch_number, p_expiry_date
                )
                ON CONFLICT (
                    warehouse_id, product_id, shelf_id,
                    COALESCE(batch_number, ''),
                    COALESCE(expiry_date, CAST('-infinity' AS DATE))
                )
                DO UPDATE SET
                    quantity = inventory.quantity + EXCLUDED.quantity,
                    updated_at = CURRENT_TIMESTAMP;
                p_result := 1;
                RETURN;
            END IF;

            -- Scarico: riga bloccata, mai sotto zero
            SELECT inventory_id, quantity INTO v_inventory_id, v_quantity
            FROM inventory
            WHERE warehouse_id = p_warehouse_id
              AND product_id = p_product_id
              AND shelf_id = p_shelf_id
              AND batch_number IS NOT DISTINCT FROM p_batch_number
              AND expiry_date IS NOT DISTINCT FROM p_expiry_date
            FOR UPDATE;

            IF v_inventory_id IS NULL THEN
                p_result := -1;
                RETURN;
            END IF;

            IF v_quantity + p_quantity < 0 THEN
                p_result := -1;
                RETURN;
            END IF;

            UPDATE inventory SET
                quantity = v_quantity + p_quantity,
                updated_at = CURRENT_TIMESTAMP
            WHERE inventory_id = v_inventory_id;
            p_result := 1;
        END;
        $$
    """))

    conn.execute(text("""
        CREATE OR REPLACE PROCEDURE sp_inventory_log_insert(
            p_warehouse_id INTEGER,
            p_product_id INTEGER,
            p_shelf_id INTEGER,
            p_quantity NUMERIC,
            p_operation_type INTEGER,
            p_source_id INTEGER,
            p_source_type INTEGER,
            p_batch_number VARCHAR,
            p_expiry_date DATE,
            p_remark VARCHAR,
            INOUT p_inventory_log_id INTEGER
        )
        LANGUAGE plpgsql
        AS $$
        BEGIN
            INSERT INTO inventory_logs (
                warehouse_id, product_id, shelf_id, quantity, operation_type,
                source_id, source_type, batch_number, expiry_date, remark
            ) VALUES (
                p_warehouse_id, p_product_id, p_shelf_id, p_quantity, p_operation_type,
                COALESCE(p_source_id, 0), p_source_type, p_batch_number, p_expiry_date, p_remark
            )
            RETURNING inventory_log_id INTO p_inventory_log_id;
        END;
        $$
    """))

    # =========================================================================
    # INDEXES
    # =========================================================================

    indexes = [
        "CREATE INDEX IF NOT EXISTS idx_outbound_details_order ON outbound_order_details(outbound_order_id)",
        "CREATE INDEX IF NOT EXISTS idx_outbound_orders_status ON outbound_orders(status)",
        "CREATE INDEX IF NOT EXISTS idx_inventory_location ON inventory(warehouse_id, product_id, shelf_id)",
        "CREATE INDEX IF NOT EXISTS idx_inventory_batch ON inventory(batch_number)",
        "CREATE INDEX IF NOT EXISTS idx_inventory_logs_product ON inventory_logs(product_id)",
        "CREATE INDEX IF NOT EXISTS idx_inventory_logs_source ON inventory_logs(source_type, source_id)",
    ]

    for idx_sql in indexes:
        conn.execute(text(idx_sql))

    print("  Initial schema WMS v1.0 created successfully")


def downgrade() -> None:
    """
    Drop procedures and tables in reverse dependency order.
    WARNING: This will destroy all data!
    """
    conn = op.get_bind()

    procedures = [
        "sp_inventory_log_insert",
        "sp_inventory_update",
        "sp_outbound_order_details_save",
    ]
    for procedure in procedures:
        conn.execute(text(f"DROP PROCEDURE IF EXISTS {procedure}"))

    tables = [
        # Inventario
        "inventory_logs", "inventory",
        # Ordini di uscita
        "outbound_order_details", "outbound_orders",
        # Anagrafiche
        "shelves", "warehouses", "products",
    ]
    for table in tables:
        conn.execute(text(f"DROP TABLE IF EXISTS {table} CASCADE"))

    print("  All tables dropped")
