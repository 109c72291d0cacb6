from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from app.riel.audit import record_event
from app.riel.db import db_session
from app.riel.modules.stories.service import (
    StoryFilter,
    StoryRepository,
    create_story,
    delete_story,
    list_stories,
    update_story,
)
from app.riel.rbac import Capability, require_capability
from app.riel.utils import json_body, reject_slug_mutation
from app.riel.validation import require_object_id

bp = Blueprint("stories", __name__)


@bp.get("")
def stories_list():
    s = db_session()
    stories = list_stories(s, StoryFilter.from_args(request.args))
    return jsonify([st.to_dict() for st in stories])


@bp.get("/id/<story_id>")
def story_get(story_id: str):
    s = db_session()
    return jsonify(StoryRepository(s).get_or_404(require_object_id(story_id)).to_dict())


@bp.get("/<slug>")
def story_get_by_slug(slug: str):
    s = db_session()
    return jsonify(StoryRepository(s).find_one_or_404(slug=slug).to_dict())


@bp.post("")
@require_capability(Capability.MANAGE_CONTENT)
def story_create():
    s = db_session()
    story = create_story(s, json_body())
    s.commit()

    record_event(
        page_type="story",
        event="create",
        item_id=story.id,
        actor=g.current_user,
        page_url="/admin/stories/create",
        extra_data={"storyTitle": story.title},
    )
    return jsonify(story.to_dict()), 201


@bp.patch("/id/<story_id>")
@require_capability(Capability.MANAGE_CONTENT)
def story_update(story_id: str):
    s = db_session()
    story = update_story(s, require_object_id(story_id), json_body())
    s.commit()

    record_event(
        page_type="story",
        event="update",
        item_id=story.id,
        actor=g.current_user,
        page_url=f"/admin/stories/edit/{story.id}",
        extra_data={"storyTitle": story.title},
    )
    return jsonify(story.to_dict())


@bp.delete("/id/<story_id>")
@require_capability(Capability.DELETE_CONTENT)
def story_delete(story_id: str):
    s = db_session()
    story = delete_story(s, require_object_id(story_id))
    s.commit()

    record_event(
        page_type="story",
        event="delete",
        item_id=story.id,
        actor=g.current_user,
        page_url="/admin/stories",
        extra_data={"storyTitle": story.title},
    )
    return jsonify({"message": "Story deleted successfully"})


@bp.route("/<slug>", methods=["PATCH", "DELETE"])
def story_mutate_by_slug(slug: str):
    reject_slug_mutation("stories")
