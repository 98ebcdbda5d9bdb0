"""
Host group form conformance run.

Replays a catalog of form scenarios (create, update, clone, cancel, delete,
apply-to-subgroups) against the application through its HTTP API and checks
messages, stored names and that rejected requests wrote nothing.

Usage:
    from groupadmin.conformance import run_suite
    report = run_suite(create_app("testing"))
"""

from groupadmin.conformance.runner import ConformanceRunner, run_suite
from groupadmin.conformance.scenarios import ConformanceReport, Operation

__all__ = ["ConformanceReport", "ConformanceRunner", "Operation", "run_suite"]
