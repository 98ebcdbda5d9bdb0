"""
Permission models — user groups, host group rights and tag filters.

Rights are stored per (user group, host group). A missing row means the
user group has no access ("None") to that host group.
"""

from groupadmin.models import db

PERM_DENY = 0
PERM_READ = 2
PERM_READ_WRITE = 3

PERMISSION_LABELS = {
    PERM_DENY: "Deny",
    PERM_READ: "Read",
    PERM_READ_WRITE: "Read-write",
}
PERMISSION_NONE_LABEL = "None"


class UserGroup(db.Model):
    __tablename__ = "usrgrp"

    usrgrpid = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)

    rights = db.relationship("Right", lazy="dynamic", cascade="all, delete-orphan")
    tag_filters = db.relationship("TagFilter", lazy="dynamic", cascade="all, delete-orphan")

    def to_dict(self):
        return {"usrgrpid": self.usrgrpid, "name": self.name}


class Right(db.Model):
    __tablename__ = "rights"

    rightid = db.Column(db.Integer, primary_key=True)
    usrgrpid = db.Column(
        db.Integer, db.ForeignKey("usrgrp.usrgrpid", ondelete="CASCADE"), nullable=False,
    )
    groupid = db.Column(
        db.Integer, db.ForeignKey("hstgrp.groupid", ondelete="CASCADE"), nullable=False,
    )
    permission = db.Column(db.Integer, nullable=False, default=PERM_DENY)

    __table_args__ = (
        db.UniqueConstraint("usrgrpid", "groupid", name="uq_rights_usrgrp_group"),
    )


class TagFilter(db.Model):
    __tablename__ = "tag_filter"

    tag_filterid = db.Column(db.Integer, primary_key=True)
    usrgrpid = db.Column(
        db.Integer, db.ForeignKey("usrgrp.usrgrpid", ondelete="CASCADE"), nullable=False,
    )
    groupid = db.Column(
        db.Integer, db.ForeignKey("hstgrp.groupid", ondelete="CASCADE"), nullable=False,
    )
    tag = db.Column(db.String(255), nullable=False, default="")
    value = db.Column(db.String(255), nullable=False, default="")

    def label(self):
        """Return the filter the way the user group form lists it."""
        return f"{self.tag}: {self.value}" if self.value else self.tag
