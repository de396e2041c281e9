from decimal import Decimal, InvalidOperation
from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from botilyx.errors import ValidationError
from botilyx.extensions import db
from botilyx.helpers import current_user_id
from botilyx.models import ShoppingItem, ShoppingList
from botilyx.utils.access import get_owned, group_user_ids
from botilyx.utils.audit import AuditAction, AuditEntity, record_action
from botilyx.utils.validation import require_fields

CENTS = Decimal("0.01")


def _price(value):
    try:
        price = Decimal(str(value)).quantize(CENTS)
    except (InvalidOperation, ValueError):
        raise ValidationError("price must be a number", field="price")
    if not price.is_finite():
        raise ValidationError("price must be a number", field="price")
    if price < 0:
        raise ValidationError("price cannot be negative", field="price")
    return price


def _quantity(value):
    if isinstance(value, bool):
        raise ValidationError("quantity must be an integer", field="quantity")
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationError("quantity must be an integer", field="quantity")
    if quantity <= 0:
        raise ValidationError("quantity must be positive", field="quantity")
    return quantity


def _build_item(data):
    if not isinstance(data, dict):
        raise ValidationError("Each item must be an object", field="items")
    require_fields(data, ["name"])
    return ShoppingItem(
        name=str(data["name"]).strip(),
        presentation=data.get("presentation"),
        laboratory=data.get("laboratory"),
        price=_price(data.get("price", 0)),
        quantity=_quantity(data.get("quantity", 1)),
    )


@jwt_required()
def list_shopping_lists():
    archived = (request.args.get("archived") or "false").lower() == "true"
    lists = (
        ShoppingList.query
        .filter(ShoppingList.user_id.in_(group_user_ids(current_user_id())), ShoppingList.archived.is_(archived))
        .order_by(ShoppingList.created_at.desc(), ShoppingList.id.desc())
        .all()
    )
    return jsonify({"success": True, "shopping_lists": [s.to_dict() for s in lists]}), 200


@jwt_required()
def create_shopping_list():
    user_id = current_user_id()
    data = request.get_json() or {}
    require_fields(data, ["name", "items"])
    if not isinstance(data["items"], list):
        raise ValidationError("items must be a list", field="items")

    items = [_build_item(item) for item in data["items"]]
    # the total is always derived from the items, never trusted from the client
    shopping_list = ShoppingList(
        user_id=user_id,
        name=str(data["name"]).strip(),
        items=items,
        total=sum((i.price * i.quantity for i in items), Decimal("0.00")),
    )
    db.session.add(shopping_list)
    db.session.flush()
    record_action(user_id, AuditAction.CREATE, AuditEntity.SHOPPING_LIST, shopping_list.id,
                  after=shopping_list.to_dict())
    db.session.commit()

    current_app.logger.info(f"Shopping list {shopping_list.id} created with {len(items)} items")
    return jsonify({"success": True, "message": "Shopping list created", "shopping_list": shopping_list.to_dict()}), 201


@jwt_required()
def get_shopping_list(list_id):
    shopping_list = get_owned(ShoppingList, list_id, current_user_id())
    if not shopping_list:
        return jsonify({"success": False, "message": "Shopping list not found"}), 404
    return jsonify({"success": True, "shopping_list": shopping_list.to_dict()}), 200


@jwt_required()
def archive_shopping_list(list_id):
    user_id = current_user_id()
    shopping_list = get_owned(ShoppingList, list_id, user_id)
    if not shopping_list:
        return jsonify({"success": False, "message": "Shopping list not found"}), 404

    shopping_list.archived = True
    record_action(user_id, AuditAction.ARCHIVE, AuditEntity.SHOPPING_LIST, shopping_list.id)
    db.session.commit()
    return jsonify({"success": True, "message": "Shopping list archived", "shopping_list": shopping_list.to_dict()}), 200


@jwt_required()
def delete_shopping_list(list_id):
    user_id = current_user_id()
    shopping_list = get_owned(ShoppingList, list_id, user_id)
    if not shopping_list:
        return jsonify({"success": False, "message": "Shopping list not found"}), 404

    record_action(user_id, AuditAction.DELETE, AuditEntity.SHOPPING_LIST, shopping_list.id,
                  before=shopping_list.to_dict())
    db.session.delete(shopping_list)
    db.session.commit()
    return jsonify({"success": True, "message": "Shopping list deleted"}), 200
