"""
User Group Blueprint — read-only view of user group permissions.

  GET /api/v1/usergroups                   list user groups
  GET /api/v1/usergroups/<id>/rights       host group permissions + tag filters
"""

from flask import Blueprint, jsonify

from groupadmin.models.permission import UserGroup
from groupadmin.services import permission_service

usergroup_bp = Blueprint("usergroup", __name__, url_prefix="/api/v1/usergroups")


@usergroup_bp.route("", methods=["GET"])
def list_user_groups():
    groups = UserGroup.query.order_by(UserGroup.name).all()
    return jsonify([g.to_dict() for g in groups]), 200


@usergroup_bp.route("/<int:usrgrpid>/rights", methods=["GET"])
def get_rights(usrgrpid):
    """Permission and tag filter tables of a user group."""
    usrgrp = permission_service.get_user_group(usrgrpid)
    if not usrgrp:
        return jsonify({"error": "User group not found"}), 404
    return jsonify({
        **usrgrp.to_dict(),
        "rights": permission_service.summarize_rights(usrgrpid),
        "tag_filters": permission_service.list_tag_filters(usrgrpid),
    }), 200
