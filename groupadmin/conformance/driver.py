"""
Form driver — fills and submits the host group form over HTTP.

The driver works like a user at the form: it opens the form description,
fills enabled fields by label, presses a button and reads back the message
the application answered with. It runs against a Flask test client, so the
whole request path (form checks, service rules, error handlers) is exercised.
"""

import logging
from dataclasses import dataclass, field

from groupadmin.conformance.scenarios import AssertionMismatch, FormResult, Operation, Outcome
from groupadmin.services.hostgroup_form import FormField

logger = logging.getLogger(__name__)


@dataclass
class HostGroupForm:
    """An opened host group form."""
    groupid: int | None
    fields: list[FormField] = field(default_factory=list)
    buttons: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "HostGroupForm":
        return cls(
            groupid=data.get("groupid"),
            fields=[FormField(**f) for f in data.get("fields", [])],
            buttons=list(data.get("buttons", [])),
        )

    def get_field(self, label: str) -> FormField:
        for form_field in self.fields:
            if form_field.name == label:
                return form_field
        raise KeyError(f'Form has no field "{label}"')

    def fill(self, values: dict) -> None:
        for label, value in values.items():
            form_field = self.get_field(label)
            if not form_field.enabled:
                raise ValueError(f'Field "{label}" is read-only')
            form_field.value = value

    def values(self) -> dict:
        return {f.name: f.value for f in self.fields}

    def payload(self) -> dict:
        """Submitted body: free text trimmed, read-only fields left out."""
        return {
            f.key: f.value.strip() if isinstance(f.value, str) else f.value
            for f in self.fields
            if f.enabled
        }

    def require_button(self, label: str) -> None:
        if label not in self.buttons:
            raise AssertionMismatch(f'Button "{label}" is not available; form has {self.buttons}')


class FlaskFormDriver:
    """Drives the host group form through a Flask test client."""

    def __init__(self, client, base_url: str = "/api/v1/hostgroups"):
        self.client = client
        self.base_url = base_url

    # ── Forms ─────────────────────────────────────────────────────────────

    def find_groupid(self, name: str) -> int:
        rv = self.client.get(self.base_url, query_string={"name": name})
        groups = rv.get_json() or []
        if not groups:
            raise LookupError(f'Host group "{name}" does not exist')
        return groups[0]["groupid"]

    def open_form(self, name: str | None = None, *, clone: bool = False) -> HostGroupForm:
        """Open the create form, or the edit (or clone) form of group *name*."""
        if name is None:
            url = f"{self.base_url}/form"
        else:
            url = f"{self.base_url}/{self.find_groupid(name)}/form"
        rv = self.client.get(url, query_string={"clone": "1"} if clone else None)
        if rv.status_code != 200:
            raise LookupError(f"Cannot open host group form {url}: HTTP {rv.status_code}")
        return HostGroupForm.from_dict(rv.get_json())

    def open_user_group(self, usrgrpid: int) -> dict:
        rv = self.client.get(f"/api/v1/usergroups/{usrgrpid}/rights")
        if rv.status_code != 200:
            raise LookupError(f"Cannot open user group {usrgrpid}: HTTP {rv.status_code}")
        return rv.get_json()

    # ── Submit ────────────────────────────────────────────────────────────

    def submit(self, operation, fields: dict, *, target: str | None = None,
               action: str | None = None) -> FormResult:
        """Fill *fields* into the form for *operation* and press its button.

        *target* names the existing group to open (update, clone, delete,
        cancel). *action* is the button pressed before Cancel.
        """
        operation = Operation(operation)
        logger.debug("Submitting %s form target=%r", operation.value, target)

        if operation is Operation.CREATE:
            form = self.open_form()
            form.fill(fields)
            form.require_button("Add")
            return self._result(self.client.post(self.base_url, json=form.payload()))

        if operation is Operation.UPDATE:
            form = self.open_form(target)
            form.fill(fields)
            form.require_button("Update")
            return self._result(
                self.client.put(f"{self.base_url}/{form.groupid}", json=form.payload()))

        if operation is Operation.CLONE:
            self.open_form(target).require_button("Clone")
            form = self.open_form(target, clone=True)
            form.fill(fields)
            form.require_button("Add")
            return self._result(self.client.post(self.base_url, json=form.payload()))

        if operation is Operation.DELETE:
            form = self.open_form(target)
            form.require_button("Delete")
            return self._result(self.client.delete(f"{self.base_url}/{form.groupid}"))

        if operation is Operation.CANCEL:
            return self.cancel(action or "Add", fields, target=target)

        raise ValueError(f"Operation {operation.value} has no form button")

    def cancel(self, action: str, fields: dict, *, target: str | None = None) -> FormResult:
        """Change the form, press *action* where it opens another form, then Cancel.

        Delete asks for confirmation first; the confirmation is dismissed.
        Nothing is sent to the server.
        """
        form = self.open_form(None if action == "Add" else target)
        form.fill(fields)
        if action == "Clone":
            form.require_button("Clone")
            form = self.open_form(target, clone=True)
        elif action in ("Update", "Delete"):
            form.require_button(action)
        form.require_button("Cancel")
        return FormResult(Outcome.CANCELLED)

    @staticmethod
    def _result(rv) -> FormResult:
        body = rv.get_json(silent=True) or {}
        if 200 <= rv.status_code < 300:
            return FormResult(Outcome.SUCCESS, body.get("message", ""))
        return FormResult(
            Outcome.FAILURE, body.get("error", ""), tuple(body.get("details", [])),
        )
