"""
Domain models for CMS records.

Records are owned by the host content-management system; these models only
carry what the agent layer reads and writes.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class TextFormat(str, Enum):
    """Text formats for formatted-text fields."""

    BASIC_HTML = "basic_html"
    FULL_HTML = "full_html"


class Record(BaseModel):
    """A structured content item such as a recipe or an email campaign."""

    entity_type: str = Field("node", description="Entity type of the record")
    bundle: str = Field(..., description="Record kind, e.g. recipe or task")
    id: Optional[str] = Field(None, description="Identifier, assigned on first save")
    title: str = Field("", description="Record title")
    uid: Optional[str] = Field(None, description="Owner user id")
    langcode: str = Field("en", description="Language code")
    fields: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("bundle")
    @classmethod
    def bundle_not_empty(cls, v: str) -> str:
        """Validate that the bundle is not empty."""
        if not v.strip():
            raise ValueError("Bundle cannot be empty")
        return v

    @classmethod
    def from_fields(cls, kind: str, fields: Dict[str, Any]) -> "Record":
        """Build a record of a kind from a flat field mapping.

        The base properties title, uid, langcode and entity_type are lifted
        out of the mapping; everything else lands in ``fields``.
        """
        fields = dict(fields)
        base = {
            key: fields.pop(key)
            for key in ("title", "uid", "langcode", "entity_type")
            if fields.get(key) is not None
        }
        fields.pop("id", None)
        return cls(bundle=kind, fields=fields, **base)

    @property
    def is_new(self) -> bool:
        return self.id is None

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def first_value(self, name: str) -> Optional[str]:
        """Return the text of a field, whatever shape it is stored in.

        Handles bare strings, formatted text ({"value": ..., "format": ...})
        and lists of such items, in which case the first item is used.
        """
        value = self.fields.get(name)
        if isinstance(value, list):
            value = value[0] if value else None
        if isinstance(value, dict):
            value = value.get("value")
        if value is None:
            return None
        return str(value)


class Reference(BaseModel):
    """A typed pointer at an entry of an external vocabulary."""

    id: str
    vocabulary: str
    name: str = ""


class NoticeLevel(str, Enum):
    """Severity of a user-visible notice."""

    STATUS = "status"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """A message surfaced to the user who triggered the save."""

    message: str
    level: NoticeLevel = NoticeLevel.STATUS
