from sqlalchemy import CheckConstraint, Column, Date, DateTime, Numeric, String, Text, UniqueConstraint, func

from constants.statuses import ORDER_INITIAL_STATUS
from models.base import Base, new_id, utcnow


class PurchaseOrder(Base):
    """
    Purchase order ("orden de compra") issued to a supplier.
    Numbers follow 'OC-YYYYMM-NNN' when generated by the service.
    """
    __tablename__ = "ordenes_compra"
    __table_args__ = (
        UniqueConstraint("numero_orden", name="uq_ordenes_compra_numero_orden"),
        CheckConstraint("monto_total > 0", name="monto_positivo"),
        CheckConstraint("estado IN ('pendiente', 'enviada', 'cancelada')", name="estado_valido"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    numero_orden = Column(String(50), nullable=False, index=True)
    nombre_proveedor = Column(String(200), nullable=False, index=True)
    email_proveedor = Column(String(255), nullable=True)
    telefono_proveedor = Column(String(20), nullable=True)
    monto_total = Column(Numeric(14, 2), nullable=False)
    moneda = Column(String(3), nullable=False, server_default="CLP")
    estado = Column(String(20), nullable=False, server_default=ORDER_INITIAL_STATUS.value, index=True)
    fecha_orden = Column(Date, nullable=False)
    fecha_entrega_esperada = Column(Date, nullable=True)
    notas = Column(Text, nullable=True)
    url_documento = Column(String(1024), nullable=True)

    creado_en = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True)
    actualizado_en = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow
    )
