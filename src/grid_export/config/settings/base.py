"""Config settings – Settings base class."""
from __future__ import annotations

import dataclasses
from typing import Any, ClassVar


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings.

    Subclasses declare their fields as dataclass fields and set ``_prefix``
    to the environment variable namespace (``GRID_EXPORT`` → ``GRID_EXPORT_FOLDER``).
    """

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""

    @classmethod
    def env_var(cls, field_name: str) -> str:
        """Environment variable that overrides ``field_name``."""
        return f"{cls._prefix}_{field_name}".upper().lstrip("_")

    @classmethod
    def env_vars(cls) -> dict[str, str]:
        """Field name → environment variable, in declaration order."""
        return {f.name: cls.env_var(f.name) for f in dataclasses.fields(cls)}

    def as_dict(self) -> dict[str, Any]:
        """Field name → value mapping (shallow)."""
        return {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}


__all__ = ["Settings"]
