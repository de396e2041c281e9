from botilyx.extensions import db
from botilyx.helpers import utcnow, isoformat

class ShoppingList(db.Model):
    __tablename__ = "shopping_list"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(160), nullable=False)
    total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    archived = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", backref=db.backref("shopping_lists", cascade="all,delete-orphan"))
    items = db.relationship("ShoppingItem", back_populates="shopping_list",
                            cascade="all,delete-orphan", order_by="ShoppingItem.id")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "total": float(self.total or 0),
            "archived": self.archived,
            "items": [i.to_dict() for i in self.items],
            "created_at": isoformat(self.created_at),
        }


class ShoppingItem(db.Model):
    __tablename__ = "shopping_item"
    id = db.Column(db.Integer, primary_key=True)
    shopping_list_id = db.Column(
        db.Integer, db.ForeignKey("shopping_list.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name = db.Column(db.String(160), nullable=False)
    presentation = db.Column(db.String(160), nullable=True)   # e.g., "20 tablets x 500mg"
    laboratory = db.Column(db.String(160), nullable=True)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)  # unit price
    quantity = db.Column(db.Integer, nullable=False, default=1)

    shopping_list = db.relationship("ShoppingList", back_populates="items")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "presentation": self.presentation,
            "laboratory": self.laboratory,
            "price": float(self.price or 0),
            "quantity": self.quantity,
        }
