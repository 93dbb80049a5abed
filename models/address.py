from sqlalchemy import Column, String, ForeignKey, UniqueConstraint

from models.base_model import BaseModel, Base


class Address(BaseModel, Base):
    __tablename__ = "addresses"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(15), nullable=False)
    address = Column(String(200), nullable=False)
    city = Column(String(100), nullable=False)
    pincode = Column(String(10), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "address", "city", "pincode", name="uq_addresses_user_location"),
    )
