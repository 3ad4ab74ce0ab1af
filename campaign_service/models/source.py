# campaign_service/models/source.py
"""
Read-only mappings of the page builder's product and block tables.

The page builder owns these rows; this service only reads the fields it
needs to seed a campaign.
"""

from sqlalchemy import Column, String, Text, Numeric

from campaign_service.db.base_class import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String(300), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(3), nullable=True)


class Block(Base):
    __tablename__ = "blocks"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(1000), nullable=True)
