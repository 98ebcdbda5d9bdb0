"""
Permission Service — user group rights and tag filters on nested host groups.

Host group nesting is purely by name: every group whose name starts with
"<parent>/" is a descendant of <parent>. Two operations move permissions
down that hierarchy:

  inherit_from_parent(group)   one-time copy from the nearest existing
                               ancestor when a group is created
  apply_to_subgroups(name)     explicit push of a group's rights and tag
                               filters onto every existing descendant

Neither function commits; the calling host group service owns the
transaction.
"""

import logging

from groupadmin.models import db
from groupadmin.models.hostgroup import HostGroup
from groupadmin.models.permission import (
    PERMISSION_LABELS,
    PERMISSION_NONE_LABEL,
    Right,
    TagFilter,
    UserGroup,
)

logger = logging.getLogger(__name__)

SUBGROUPS_SUFFIX = " (including subgroups)"


# ── Hierarchy helpers ────────────────────────────────────────────────────


def parent_names(name: str) -> list[str]:
    """Return every ancestor name of *name*, nearest first.

    >>> parent_names("Europe/Latvia/Riga")
    ['Europe/Latvia', 'Europe']
    """
    parts = name.split("/")
    return ["/".join(parts[:i]) for i in range(len(parts) - 1, 0, -1)]


def is_descendant(name: str, ancestor: str) -> bool:
    return name.startswith(ancestor + "/")


def descendants_of(name: str) -> list[HostGroup]:
    return (
        HostGroup.query
        .filter(HostGroup.name.startswith(name + "/", autoescape=True))
        .order_by(HostGroup.name)
        .all()
    )


# ── Propagation ──────────────────────────────────────────────────────────


def inherit_from_parent(group: HostGroup) -> str | None:
    """Copy rights and tag filters from the nearest existing ancestor.

    Returns the ancestor's name, or ``None`` when the group has no existing
    ancestor and nothing was copied.
    """
    for parent_name in parent_names(group.name):
        parent = HostGroup.query.filter_by(name=parent_name).first()
        if parent is None:
            continue
        for right in Right.query.filter_by(groupid=parent.groupid).all():
            db.session.add(Right(
                usrgrpid=right.usrgrpid, groupid=group.groupid, permission=right.permission,
            ))
        for tag_filter in TagFilter.query.filter_by(groupid=parent.groupid).all():
            db.session.add(TagFilter(
                usrgrpid=tag_filter.usrgrpid, groupid=group.groupid,
                tag=tag_filter.tag, value=tag_filter.value,
            ))
        db.session.flush()
        return parent.name
    return None


def apply_to_subgroups(name: str) -> int:
    """Give every descendant of *name* exactly the rights and tag filters of *name*.

    For each user group: a descendant's right is set to the ancestor's
    permission, or removed when the ancestor has none; the descendant's tag
    filters are replaced by copies of the ancestor's. Groups outside the
    subtree are not touched.

    Returns the number of descendants updated.
    """
    ancestor = HostGroup.query.filter_by(name=name).first()
    if ancestor is None:
        return 0
    subgroups = descendants_of(name)
    if not subgroups:
        return 0
    subgroup_ids = [g.groupid for g in subgroups]

    ancestor_rights = {
        r.usrgrpid: r.permission
        for r in Right.query.filter_by(groupid=ancestor.groupid).all()
    }
    ancestor_tags = TagFilter.query.filter_by(groupid=ancestor.groupid).order_by(
        TagFilter.tag_filterid).all()

    existing = {
        (r.usrgrpid, r.groupid): r
        for r in Right.query.filter(Right.groupid.in_(subgroup_ids)).all()
    }
    usrgrpids = set(ancestor_rights) | {usrgrpid for usrgrpid, _ in existing}

    for usrgrpid in sorted(usrgrpids):
        permission = ancestor_rights.get(usrgrpid)
        for groupid in subgroup_ids:
            right = existing.get((usrgrpid, groupid))
            if permission is None:
                if right is not None:
                    db.session.delete(right)
            elif right is None:
                db.session.add(Right(usrgrpid=usrgrpid, groupid=groupid, permission=permission))
            else:
                right.permission = permission

    TagFilter.query.filter(TagFilter.groupid.in_(subgroup_ids)).delete(synchronize_session=False)
    for groupid in subgroup_ids:
        for tag_filter in ancestor_tags:
            db.session.add(TagFilter(
                usrgrpid=tag_filter.usrgrpid, groupid=groupid,
                tag=tag_filter.tag, value=tag_filter.value,
            ))
    db.session.flush()

    logger.info("Applied permissions of '%s' to %d subgroup(s)", name, len(subgroup_ids),
                extra={"groupid": ancestor.groupid, "group_name": name})
    return len(subgroup_ids)


# ── User group views ─────────────────────────────────────────────────────


def get_user_group(usrgrpid: int) -> UserGroup | None:
    return db.session.get(UserGroup, usrgrpid)


def summarize_rights(usrgrpid: int) -> list[dict]:
    """Return the host group permission rows of a user group, sorted by name.

    A row is listed when the group carries a right, or when it has an
    ancestor that does (shown as "None"). A group whose descendants all share
    its permission is collapsed into "<name> (including subgroups)" and the
    descendants are not listed separately.
    """
    perms = {
        r.groupid: r.permission
        for r in Right.query.filter_by(usrgrpid=usrgrpid).all()
    }
    by_name = {g.name: perms.get(g.groupid) for g in HostGroup.query.all()}
    names = sorted(by_name)

    rows = []
    hidden = set()
    for name in names:
        if name in hidden:
            continue
        permission = by_name[name]
        if permission is None:
            if not any(by_name.get(p) is not None for p in parent_names(name)):
                continue
            rows.append({"group": name, "permission": PERMISSION_NONE_LABEL})
            continue

        subtree = [n for n in names if is_descendant(n, name)]
        label = name
        if subtree and all(by_name[n] == permission for n in subtree):
            label += SUBGROUPS_SUFFIX
            hidden.update(subtree)
        rows.append({"group": label, "permission": PERMISSION_LABELS[permission]})
    return rows


def list_tag_filters(usrgrpid: int) -> list[dict]:
    """Return tag filter rows of a user group, one row per host group."""
    rows = (
        db.session.query(HostGroup.name, TagFilter)
        .join(TagFilter, TagFilter.groupid == HostGroup.groupid)
        .filter(TagFilter.usrgrpid == usrgrpid)
        .order_by(TagFilter.tag_filterid)
        .all()
    )
    grouped: dict[str, list[str]] = {}
    for group_name, tag_filter in rows:
        grouped.setdefault(group_name, []).append(tag_filter.label())
    return [
        {"group": group_name, "tags": ", ".join(grouped[group_name])}
        for group_name in sorted(grouped)
    ]
