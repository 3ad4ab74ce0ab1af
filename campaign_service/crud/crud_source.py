# campaign_service/crud/crud_source.py

from typing import Optional

from sqlalchemy.orm import Session

from campaign_service.models.source import Block, Product


class CRUDSource:
    """Reads of the page builder's products and blocks."""

    def get_product(self, db: Session, product_id: str) -> Optional[Product]:
        return db.query(Product).filter(Product.id == product_id).first()

    def get_block(self, db: Session, block_id: str) -> Optional[Block]:
        return db.query(Block).filter(Block.id == block_id).first()

    def get_products(self, db: Session, product_ids) -> dict:
        ids = [pid for pid in set(product_ids) if pid]
        if not ids:
            return {}
        return {p.id: p for p in db.query(Product).filter(Product.id.in_(ids)).all()}


source = CRUDSource()
