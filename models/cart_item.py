from sqlalchemy import Column, String, Integer, ForeignKey, Numeric, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class CartItem(BaseModel, Base):
    __tablename__ = "cart_items"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    size = Column(String(32), nullable=False)
    # Price snapshot of the chosen size at the time it was added
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    product = relationship("Product")

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", "size", name="uq_cart_items_user_product_size"),
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )

    @property
    def line_total(self):
        return self.price * self.quantity
