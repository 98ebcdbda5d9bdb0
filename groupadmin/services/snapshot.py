"""
SnapshotService — content hashes of table state.

A hash is an md5 over the rows a query returns. Two hashes of the same query
are equal only if no row was inserted, deleted or changed in between, which
is how "a rejected request wrote nothing" gets checked.

Queries must fix their row order with ORDER BY on primary keys; without it
the database may return the same rows in a different order and the hash
would change with nothing written.
"""

import hashlib
import re

from sqlalchemy import text

from groupadmin.models import db

# Host groups with their host links. LEFT JOIN so groups without hosts count.
GROUPS_SQL = (
    "SELECT * FROM hstgrp g LEFT JOIN hosts_groups hg ON g.groupid=hg.groupid"
    " ORDER BY g.groupid, hg.hostgroupid"
)
PERMISSIONS_SQL = "SELECT * FROM rights ORDER BY rightid"
TAG_FILTERS_SQL = "SELECT * FROM tag_filter ORDER BY tag_filterid"

# Every table a host group write can touch.
SNAPSHOT_QUERIES = (
    GROUPS_SQL,
    PERMISSIONS_SQL,
    TAG_FILTERS_SQL,
    "SELECT * FROM opgroup ORDER BY opgroupid",
    "SELECT * FROM operations ORDER BY operationid",
    "SELECT * FROM maintenances_groups ORDER BY maintenance_groupid",
    "SELECT * FROM corr_condition_group ORDER BY corr_conditionid",
    "SELECT * FROM group_prototype ORDER BY group_prototypeid",
    "SELECT * FROM scripts ORDER BY scriptid",
)

_ORDER_BY_RE = re.compile(r"\border\s+by\b", re.IGNORECASE)


class SnapshotService:
    """Computes content hashes of query results."""

    @staticmethod
    def content_hash(query: str, params: dict | None = None) -> str:
        """Return the md5 hex digest of the rows *query* returns.

        Raises ValueError for a query without ORDER BY.
        """
        if not _ORDER_BY_RE.search(query):
            raise ValueError(f"Snapshot query needs a canonical ORDER BY: {query}")

        digest = hashlib.md5()
        for row in db.session.execute(text(query), params or {}):
            line = "\x1f".join("\\N" if value is None else str(value) for value in row)
            digest.update(line.encode("utf-8"))
            digest.update(b"\n")
        return digest.hexdigest()

    @staticmethod
    def capture(queries=SNAPSHOT_QUERIES) -> dict[str, str]:
        """Hash every query in *queries*; keys are the queries themselves."""
        return {query: SnapshotService.content_hash(query) for query in queries}

    @staticmethod
    def count(query: str, params: dict | None = None) -> int:
        """Return the number of rows *query* yields."""
        return len(db.session.execute(text(query), params or {}).all())
