"""
Host Group Blueprint — the host group form as a JSON API.

Endpoints:
  GET    /api/v1/hostgroups                 list (filters: name, search)
  POST   /api/v1/hostgroups                 create (Add button; also Clone submit)
  GET    /api/v1/hostgroups/form            empty create form
  GET    /api/v1/hostgroups/<id>            single group
  GET    /api/v1/hostgroups/<id>/form       edit form (?clone=1 → clone form)
  PUT    /api/v1/hostgroups/<id>            update (Update button)
  DELETE /api/v1/hostgroups/<id>            delete (Delete button)

Responses mirror the messages the form shows:
  success  {"message": "Group added", "group": {...}}
  failure  {"error": "Cannot add group", "details": ["Host group ... already exists."]}

Form-level checks (400, "Page received incorrect data") happen here; every
business rule lives in the service layer.
"""

import logging

from flask import Blueprint, jsonify, request

from groupadmin.core.exceptions import (
    ConflictError,
    FormError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from groupadmin.models import db
from groupadmin.services import hostgroup_service as svc
from groupadmin.services.hostgroup_form import NAME_FIELD, SUBGROUPS_FIELD, build_form

logger = logging.getLogger(__name__)

hostgroup_bp = Blueprint("hostgroup", __name__, url_prefix="/api/v1/hostgroups")

_FAILURE_TITLES = {
    "POST": "Cannot add group",
    "PUT": "Cannot update group",
    "DELETE": "Cannot delete group",
}


def _failure(title: str, error: Exception, status: int):
    return jsonify({"error": title, "details": [str(error)]}), status


def _action_title() -> str:
    return _FAILURE_TITLES.get(request.method, "Cannot load group")


# ── Error handlers ────────────────────────────────────────────────────────────


@hostgroup_bp.errorhandler(FormError)
def _handle_form_error(error: FormError):
    return _failure(FormError.title, error, 400)


@hostgroup_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    logger.info("Host group %s not found", error.resource_id)
    return _failure(_action_title(), error, 404)


@hostgroup_bp.errorhandler(ValidationError)
def _handle_validation(error: ValidationError):
    return _failure(_action_title(), error, 422)


@hostgroup_bp.errorhandler(ConflictError)
def _handle_conflict(error: ConflictError):
    return _failure(_action_title(), error, 409)


@hostgroup_bp.errorhandler(ReferentialIntegrityError)
def _handle_referential(error: ReferentialIntegrityError):
    logger.info("Delete blocked by %s '%s'", error.dependent_type, error.dependent_name)
    return _failure(_action_title(), error, 409)


@hostgroup_bp.errorhandler(Exception)
def _handle_unexpected(error: Exception):
    db.session.rollback()
    logger.exception("Unexpected error in hostgroup_bp endpoint=%s", request.endpoint)
    return jsonify({"error": "Internal server error"}), 500


# ── Form input ────────────────────────────────────────────────────────────────


def _read_form(*, partial: bool = False) -> dict:
    """Return the submitted fields with the name trimmed.

    An empty name is a form error; on update (*partial*) the name may be
    omitted entirely. A body that is not a JSON object counts as an empty form.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    payload = {}
    if "name" in data or not partial:
        name = data.get("name")
        if name is not None and not isinstance(name, str):
            raise FormError(NAME_FIELD, "must be a string")
        if not name or not name.strip():
            raise FormError(NAME_FIELD, "cannot be empty")
        payload["name"] = name.strip()
    if "subgroups" in data:
        # Only a JSON boolean applies permissions to subgroups.
        if not isinstance(data["subgroups"], bool):
            raise FormError(SUBGROUPS_FIELD, "must be true or false")
        payload["subgroups"] = data["subgroups"]
    return payload


# ═════════════════════════════════════════════════════════════════════════
# Host group CRUD
# ═════════════════════════════════════════════════════════════════════════


@hostgroup_bp.route("", methods=["GET"])
def list_groups():
    """List host groups."""
    groups = svc.list_groups(
        name=request.args.get("name"),
        search=request.args.get("search"),
    )
    return jsonify([g.to_dict() for g in groups]), 200


@hostgroup_bp.route("", methods=["POST"])
def create_group():
    """Create a host group."""
    group = svc.create_group(_read_form())
    return jsonify({"message": "Group added", "group": group.to_dict()}), 201


@hostgroup_bp.route("/form", methods=["GET"])
def new_form():
    return jsonify(build_form()), 200


@hostgroup_bp.route("/<int:groupid>", methods=["GET"])
def get_group(groupid):
    return jsonify(svc.get_group(groupid).to_dict()), 200


@hostgroup_bp.route("/<int:groupid>/form", methods=["GET"])
def edit_form(groupid):
    """Edit form for a group, or a prefilled create form with ?clone=1."""
    clone = request.args.get("clone", "0") in ("1", "true")
    return jsonify(build_form(svc.get_group(groupid), clone=clone)), 200


@hostgroup_bp.route("/<int:groupid>", methods=["PUT"])
def update_group(groupid):
    """Update a host group; ``subgroups: true`` applies its permissions to subgroups."""
    group = svc.update_group(groupid, _read_form(partial=True))
    return jsonify({"message": "Group updated", "group": group.to_dict()}), 200


@hostgroup_bp.route("/<int:groupid>", methods=["DELETE"])
def delete_group(groupid):
    svc.delete_group(groupid)
    return jsonify({"message": "Group deleted"}), 200
