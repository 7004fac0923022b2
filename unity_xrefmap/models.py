"""Data models — raw DocFX symbol records and the xrefmap entries built from them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SymbolRecord:
    """One documented API element as emitted by ``docfx metadata``."""

    uid: str
    comment_id: str
    name: str | None = None
    full_name: str | None = None
    name_with_type: str | None = None
    type: str | None = None

    @classmethod
    def from_item(cls, item: dict) -> "SymbolRecord":
        """Build a record from one entry of a ManagedReference ``items`` list.

        Raises:
            KeyError: If ``uid`` or ``commentId`` is missing.
        """
        return cls(
            uid=str(item["uid"]),
            comment_id=str(item["commentId"]),
            name=_optional_str(item.get("name")),
            full_name=_optional_str(item.get("fullName")),
            name_with_type=_optional_str(item.get("nameWithType")),
            type=_optional_str(item.get("type")),
        )


@dataclass(frozen=True)
class XRefEntry:
    """A single ``references`` entry of an xrefmap.yml file."""

    uid: str
    href: str
    comment_id: str
    name: str | None = None
    full_name: str | None = None
    name_with_type: str | None = None
    type: str | None = None

    @classmethod
    def from_record(cls, record: SymbolRecord, href: str) -> "XRefEntry":
        return cls(
            uid=record.uid,
            href=href,
            comment_id=record.comment_id,
            name=record.name,
            full_name=record.full_name,
            name_with_type=record.name_with_type,
            type=record.type,
        )

    def to_dict(self) -> dict:
        """Serialize with DocFX field names, in xrefmap field order.

        Descriptive fields that were absent from the source record are left out.
        """
        fields = [
            ("uid", self.uid),
            ("name", self.name),
            ("fullName", self.full_name),
            ("href", self.href),
            ("commentId", self.comment_id),
            ("nameWithType", self.name_with_type),
            ("type", self.type),
        ]
        return {key: value for key, value in fields if value is not None}


def _optional_str(value) -> str | None:
    # An empty scalar loads as "" and means the field is absent.
    return None if value is None or value == "" else str(value)
