"""initial schema: ordenes_compra, facturas

Revision ID: 0001
Revises:
Create Date: 2025-05-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # purchase orders
    op.create_table(
        "ordenes_compra",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("numero_orden", sa.String(length=50), nullable=False),
        sa.Column("nombre_proveedor", sa.String(length=200), nullable=False),
        sa.Column("email_proveedor", sa.String(length=255), nullable=True),
        sa.Column("telefono_proveedor", sa.String(length=20), nullable=True),
        sa.Column("monto_total", sa.Numeric(14, 2), nullable=False),
        sa.Column("moneda", sa.String(length=3), nullable=False, server_default="CLP"),
        sa.Column("estado", sa.String(length=20), nullable=False, server_default="pendiente"),
        sa.Column("fecha_orden", sa.Date(), nullable=False),
        sa.Column("fecha_entrega_esperada", sa.Date(), nullable=True),
        sa.Column("notas", sa.Text(), nullable=True),
        sa.Column("url_documento", sa.String(length=1024), nullable=True),
        sa.Column("creado_en", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("actualizado_en", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_ordenes_compra"),
        sa.UniqueConstraint("numero_orden", name="uq_ordenes_compra_numero_orden"),
        sa.CheckConstraint("monto_total > 0", name="ck_ordenes_compra_monto_positivo"),
        sa.CheckConstraint(
            "estado IN ('pendiente', 'enviada', 'cancelada')", name="ck_ordenes_compra_estado_valido"
        ),
    )
    op.create_index("ix_ordenes_compra_numero_orden", "ordenes_compra", ["numero_orden"], unique=False)
    op.create_index("ix_ordenes_compra_nombre_proveedor", "ordenes_compra", ["nombre_proveedor"], unique=False)
    op.create_index("ix_ordenes_compra_estado", "ordenes_compra", ["estado"], unique=False)
    op.create_index("ix_ordenes_compra_creado_en", "ordenes_compra", ["creado_en"], unique=False)

    # invoices, each billed against one order
    op.create_table(
        "facturas",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("numero_factura", sa.String(length=50), nullable=False),
        sa.Column("orden_compra_id", sa.String(length=36), nullable=False),
        sa.Column("nombre_vendedor", sa.String(length=200), nullable=False),
        sa.Column("email_vendedor", sa.String(length=255), nullable=True),
        sa.Column("telefono_vendedor", sa.String(length=20), nullable=True),
        sa.Column("monto_total", sa.Numeric(14, 2), nullable=False),
        sa.Column("moneda", sa.String(length=3), nullable=False, server_default="CLP"),
        sa.Column("estado", sa.String(length=20), nullable=False, server_default="pendiente"),
        sa.Column("fecha_factura", sa.Date(), nullable=False),
        sa.Column("fecha_vencimiento", sa.Date(), nullable=True),
        sa.Column("fecha_pago", sa.Date(), nullable=True),
        sa.Column("notas", sa.Text(), nullable=True),
        sa.Column("url_documento", sa.String(length=1024), nullable=True),
        sa.Column("creado_en", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("actualizado_en", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_facturas"),
        sa.UniqueConstraint("numero_factura", name="uq_facturas_numero_factura"),
        sa.ForeignKeyConstraint(
            ["orden_compra_id"],
            ["ordenes_compra.id"],
            name="fk_facturas_orden_compra_id_ordenes_compra",
            ondelete="RESTRICT",
        ),
        sa.CheckConstraint("monto_total > 0", name="ck_facturas_monto_positivo"),
        sa.CheckConstraint("estado IN ('pendiente', 'enviada', 'pagada')", name="ck_facturas_estado_valido"),
    )
    op.create_index("ix_facturas_numero_factura", "facturas", ["numero_factura"], unique=False)
    op.create_index("ix_facturas_orden_compra_id", "facturas", ["orden_compra_id"], unique=False)
    op.create_index("ix_facturas_nombre_vendedor", "facturas", ["nombre_vendedor"], unique=False)
    op.create_index("ix_facturas_estado", "facturas", ["estado"], unique=False)
    op.create_index("ix_facturas_fecha_vencimiento", "facturas", ["fecha_vencimiento"], unique=False)
    op.create_index("ix_facturas_creado_en", "facturas", ["creado_en"], unique=False)


def downgrade():
    op.drop_index("ix_facturas_creado_en", table_name="facturas")
    op.drop_index("ix_facturas_fecha_vencimiento", table_name="facturas")
    op.drop_index("ix_facturas_estado", table_name="facturas")
    op.drop_index("ix_facturas_nombre_vendedor", table_name="facturas")
    op.drop_index("ix_facturas_orden_compra_id", table_name="facturas")
    op.drop_index("ix_facturas_numero_factura", table_name="facturas")
    op.drop_table("facturas")
    op.drop_index("ix_ordenes_compra_creado_en", table_name="ordenes_compra")
    op.drop_index("ix_ordenes_compra_estado", table_name="ordenes_compra")
    op.drop_index("ix_ordenes_compra_nombre_proveedor", table_name="ordenes_compra")
    op.drop_index("ix_ordenes_compra_numero_orden", table_name="ordenes_compra")
    op.drop_table("ordenes_compra")
