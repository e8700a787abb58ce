"""Base model shared by all wire-facing domain types."""
from typing import Any, Dict

from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake-case attributes in Python, camelCase on the wire and on disk."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def normalize_keys(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Map camelCase aliases to attribute names and drop unknown keys."""
        fields = cls.model_fields
        by_alias = {info.alias: name for name, info in fields.items() if info.alias}
        clean = {}
        for key, value in data.items():
            name = key if key in fields else by_alias.get(key)
            if name is not None:
                clean[name] = value
        return clean

    def merged(self, updates: Dict[str, Any], strict: bool = False):
        """Shallow-merge ``updates`` into a validated copy.

        Keys may be attribute names or camelCase aliases. When the merged data
        does not validate, ``self`` is returned unchanged, or the
        ``ValidationError`` is raised if ``strict`` is set.
        """
        clean = self.normalize_keys(updates)
        if not clean:
            return self
        try:
            return type(self).model_validate({**self.model_dump(), **clean})
        except ValidationError:
            if strict:
                raise
            return self
