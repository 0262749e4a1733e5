"""
api.routes_products - read-only product listing, for checking an import.
"""

from flask import request, jsonify

from api import api_bp
from db import get_session, Product
import config


@api_bp.route("/products")
def list_products():
    """GET /api/v1/products?q=&limit=100&offset=0"""
    q      = request.args.get("q", "").strip()
    limit  = min(int(request.args.get("limit", config.API_DEFAULT_LIMIT)),
                 config.API_MAX_LIMIT)
    offset = int(request.args.get("offset", 0))

    session = get_session()
    try:
        query = session.query(Product)
        if q:
            query = query.filter(Product.name.ilike(f"%{q}%"))
        total = query.count()
        products = query.order_by(Product.id).offset(offset).limit(limit).all()
        return jsonify({
            "total": total,
            "offset": offset,
            "limit": limit,
            "products": [p.to_dict() for p in products],
        })
    finally:
        session.close()


@api_bp.route("/products/<int:product_id>")
def get_product(product_id: int):
    session = get_session()
    try:
        product = session.get(Product, product_id)
        if product is None:
            return jsonify({"error": "not found"}), 404
        return jsonify(product.to_dict())
    finally:
        session.close()
