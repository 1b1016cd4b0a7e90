from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint, func

from constants.statuses import INVOICE_INITIAL_STATUS
from models.base import Base, new_id, utcnow


class Invoice(Base):
    """
    Invoice ("factura") billed against exactly one purchase order.
    Numbers follow 'FAC-YYYYMM-NNN' when generated by the service.
    """
    __tablename__ = "facturas"
    __table_args__ = (
        UniqueConstraint("numero_factura", name="uq_facturas_numero_factura"),
        CheckConstraint("monto_total > 0", name="monto_positivo"),
        CheckConstraint("estado IN ('pendiente', 'enviada', 'pagada')", name="estado_valido"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    numero_factura = Column(String(50), nullable=False, index=True)
    orden_compra_id = Column(
        String(36), ForeignKey("ordenes_compra.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    nombre_vendedor = Column(String(200), nullable=False, index=True)
    email_vendedor = Column(String(255), nullable=True)
    telefono_vendedor = Column(String(20), nullable=True)
    monto_total = Column(Numeric(14, 2), nullable=False)
    moneda = Column(String(3), nullable=False, server_default="CLP")
    estado = Column(String(20), nullable=False, server_default=INVOICE_INITIAL_STATUS.value, index=True)
    fecha_factura = Column(Date, nullable=False)
    fecha_vencimiento = Column(Date, nullable=True, index=True)
    fecha_pago = Column(Date, nullable=True)
    notas = Column(Text, nullable=True)
    url_documento = Column(String(1024), nullable=True)

    creado_en = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True)
    actualizado_en = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow
    )
