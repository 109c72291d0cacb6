from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.modules.films.service import (
    FilmFilter,
    FilmRepository,
    create_film,
    delete_film,
    list_films,
    update_film,
)
from app.riel.rbac import Capability, require_capability
from app.riel.utils import json_body, reject_slug_mutation
from app.riel.validation import require_object_id

bp = Blueprint("films", __name__)


# ---------- Public reads ----------
@bp.get("")
def films_list():
    s = db_session()
    films = list_films(s, FilmFilter.from_args(request.args))
    return jsonify([f.to_dict() for f in films])


@bp.get("/id/<film_id>")
def film_get(film_id: str):
    s = db_session()
    film = FilmRepository(s).get_or_404(require_object_id(film_id))
    return jsonify(film.to_dict())


@bp.get("/<slug>")
def film_get_by_slug(slug: str):
    s = db_session()
    film = FilmRepository(s).find_one_or_404(slug=slug)
    return jsonify(film.to_dict())


# ---------- Mutations ----------
@bp.post("")
@require_capability(Capability.MANAGE_CONTENT)
def film_create():
    s = db_session()
    film = create_film(s, json_body())
    s.commit()

    record_event(
        page_type="film",
        event="create",
        item_id=film.id,
        actor=g.current_user,
        page_url="/admin/films/create",
        extra_data={"filmTitle": film.title},
    )
    return jsonify(film.to_dict()), 201


@bp.patch("/id/<film_id>")
@require_capability(Capability.MANAGE_CONTENT)
def film_update(film_id: str):
    s = db_session()
    film_id = require_object_id(film_id)
    film = update_film(s, film_id, json_body())
    s.commit()

    record_event(
        page_type="film",
        event="update",
        item_id=film.id,
        actor=g.current_user,
        page_url=f"/admin/films/edit/{film.id}",
        extra_data={"filmTitle": film.title},
    )
    return jsonify(film.to_dict())


@bp.delete("/id/<film_id>")
@require_capability(Capability.DELETE_CONTENT)
def film_delete(film_id: str):
    s = db_session()
    film = delete_film(s, require_object_id(film_id))
    s.commit()

    record_event(
        page_type="film",
        event="delete",
        item_id=film.id,
        actor=g.current_user,
        page_url="/admin/films",
        extra_data={"filmTitle": film.title},
    )
    return jsonify({"message": "Film deleted successfully"})


@bp.route("/<slug>", methods=["PATCH", "DELETE"])
def film_mutate_by_slug(slug: str):
    reject_slug_mutation("films")
