from sqlalchemy import Column, Integer, String, Boolean, Numeric
from pastelaria.database import Base


class Product(Base):
    """Catálogo (somente leitura para o caixa). O cadastro fica fora daqui."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)  # pastel, bebida, ...
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, default=True)
