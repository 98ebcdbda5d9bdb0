"""
Host group form description.

The form is described as plain field records rather than rendered markup:
a client (or the conformance driver) opens the description, fills the
enabled fields and submits the resulting payload to the host group API.
"""

from dataclasses import asdict, dataclass

from groupadmin.models.hostgroup import NAME_MAX_LENGTH, HostGroup

NAME_FIELD = "Group name"
SUBGROUPS_FIELD = "Apply permissions and tag filters to all subgroups"
DISCOVERED_BY_FIELD = "Discovered by"


@dataclass
class FormField:
    """One form field: label, payload key, current value and flags."""
    name: str
    key: str
    value: object = ""
    enabled: bool = True
    required: bool = False
    maxlength: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def build_form(group: HostGroup | None = None, *, clone: bool = False) -> dict:
    """Describe the host group form.

    - no group: empty create form
    - group: edit form; the name of a discovered group is read-only
    - group + clone: create form prefilled with the group's name
    """
    if group is None or clone:
        fields = [
            FormField(NAME_FIELD, "name", group.name if group else "",
                      required=True, maxlength=NAME_MAX_LENGTH),
        ]
        return {
            "groupid": None,
            "fields": [f.to_dict() for f in fields],
            "buttons": ["Add", "Cancel"],
        }

    fields = []
    if group.is_discovered:
        fields.append(FormField(DISCOVERED_BY_FIELD, "discovery_rule",
                                group.discovery_rule or "", enabled=False))
    fields.append(FormField(NAME_FIELD, "name", group.name, enabled=not group.is_discovered,
                            required=True, maxlength=NAME_MAX_LENGTH))
    fields.append(FormField(SUBGROUPS_FIELD, "subgroups", False))
    return {
        "groupid": group.groupid,
        "fields": [f.to_dict() for f in fields],
        "buttons": ["Update", "Clone", "Delete", "Cancel"],
    }
