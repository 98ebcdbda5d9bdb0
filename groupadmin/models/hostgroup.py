"""
Host group models — host groups, hosts and the host ↔ group join table.

A host group name encodes its place in the hierarchy with "/" separators:
"Europe/Latvia" is nested under "Europe". The parent does not have to exist.
"""

from groupadmin.models import db

# hstgrp.flags
GROUP_FLAG_PLAIN = 0
GROUP_FLAG_DISCOVERED = 4

NAME_MAX_LENGTH = 255


# ═══════════════════════════════════════════════════════════════
# 1. HOST GROUPS
# ═══════════════════════════════════════════════════════════════
class HostGroup(db.Model):
    __tablename__ = "hstgrp"

    groupid = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(NAME_MAX_LENGTH), unique=True, nullable=False)
    flags = db.Column(db.Integer, nullable=False, default=GROUP_FLAG_PLAIN)
    internal = db.Column(db.Boolean, nullable=False, default=False)
    discovery_rule = db.Column(db.String(255))  # LLD rule that created a discovered group

    host_links = db.relationship(
        "HostGroupLink", back_populates="group", lazy="dynamic",
    )

    @property
    def is_discovered(self):
        return self.flags == GROUP_FLAG_DISCOVERED

    def to_dict(self):
        return {
            "groupid": self.groupid,
            "name": self.name,
            "flags": self.flags,
            "internal": self.internal,
            "discovery_rule": self.discovery_rule,
        }


# ═══════════════════════════════════════════════════════════════
# 2. HOSTS
# ═══════════════════════════════════════════════════════════════
class Host(db.Model):
    __tablename__ = "hosts"

    hostid = db.Column(db.Integer, primary_key=True)
    host = db.Column(db.String(128), unique=True, nullable=False)
    status = db.Column(db.Integer, nullable=False, default=0)  # 0 monitored, 1 disabled

    group_links = db.relationship(
        "HostGroupLink", back_populates="host", lazy="dynamic",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "hostid": self.hostid,
            "host": self.host,
            "status": self.status,
            "groups": [link.group.name for link in self.group_links.all()],
        }


# ═══════════════════════════════════════════════════════════════
# 3. HOSTS_GROUPS (Junction table)
# ═══════════════════════════════════════════════════════════════
class HostGroupLink(db.Model):
    __tablename__ = "hosts_groups"

    hostgroupid = db.Column(db.Integer, primary_key=True)
    hostid = db.Column(
        db.Integer, db.ForeignKey("hosts.hostid", ondelete="CASCADE"), nullable=False,
    )
    groupid = db.Column(
        db.Integer, db.ForeignKey("hstgrp.groupid", ondelete="CASCADE"), nullable=False,
    )

    __table_args__ = (
        db.UniqueConstraint("hostid", "groupid", name="uq_hosts_groups"),
        db.Index("ix_hosts_groups_groupid", "groupid"),
    )

    host = db.relationship("Host", back_populates="group_links")
    group = db.relationship("HostGroup", back_populates="host_links")
