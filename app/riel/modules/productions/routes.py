from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.modules.productions.service import (
    ProductionFilter,
    ProductionRepository,
    create_production,
    delete_production,
    list_productions,
    update_production,
)
from app.riel.rbac import Capability, require_capability
from app.riel.utils import json_body, reject_slug_mutation
from app.riel.validation import require_object_id

bp = Blueprint("productions", __name__)


@bp.get("")
def productions_list():
    s = db_session()
    productions = list_productions(s, ProductionFilter.from_args(request.args))
    return jsonify([p.to_dict() for p in productions])


@bp.get("/id/<production_id>")
def production_get(production_id: str):
    s = db_session()
    production = ProductionRepository(s).get_or_404(require_object_id(production_id))
    return jsonify(production.to_dict())


@bp.get("/<slug>")
def production_get_by_slug(slug: str):
    s = db_session()
    return jsonify(ProductionRepository(s).find_one_or_404(slug=slug).to_dict())


@bp.post("")
@require_capability(Capability.MANAGE_CONTENT)
def production_create():
    s = db_session()
    production = create_production(s, json_body())
    s.commit()

    record_event(
        page_type="production",
        event="create",
        item_id=production.id,
        actor=g.current_user,
        page_url="/admin/productions/create",
        extra_data={"productionTitle": production.title},
    )
    return jsonify(production.to_dict()), 201


@bp.patch("/id/<production_id>")
@require_capability(Capability.MANAGE_CONTENT)
def production_update(production_id: str):
    s = db_session()
    production = update_production(s, require_object_id(production_id), json_body())
    s.commit()

    record_event(
        page_type="production",
        event="update",
        item_id=production.id,
        actor=g.current_user,
        page_url=f"/admin/productions/edit/{production.id}",
        extra_data={"productionTitle": production.title},
    )
    return jsonify(production.to_dict())


@bp.delete("/id/<production_id>")
@require_capability(Capability.DELETE_CONTENT)
def production_delete(production_id: str):
    s = db_session()
    production = delete_production(s, require_object_id(production_id))
    s.commit()

    record_event(
        page_type="production",
        event="delete",
        item_id=production.id,
        actor=g.current_user,
        page_url="/admin/productions",
        extra_data={"productionTitle": production.title},
    )
    return jsonify({"message": "Production deleted successfully"})


@bp.route("/<slug>", methods=["PATCH", "DELETE"])
def production_mutate_by_slug(slug: str):
    reject_slug_mutation("productions")
