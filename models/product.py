from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Numeric,
    Text,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Product(BaseModel, Base):
    __tablename__ = "products"

    name = Column(String(255), nullable=False)
    image = Column(String(512), nullable=True)  # URL; uploads are handled elsewhere
    description = Column(Text, nullable=False)
    benefits = Column(Text, nullable=False, default="")
    category = Column(String(128), nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    sizes = relationship(
        "ProductSize",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductSize.price",
    )

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_nonnegative"),
        Index("ix_products_name", "name"),
        Index("ix_products_category", "category"),
    )


class ProductSize(BaseModel, Base):
    __tablename__ = "product_sizes"

    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    size = Column(String(32), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    product = relationship("Product", back_populates="sizes")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_sizes_price_nonnegative"),
    )
