"""Quick reminder templates shown in the create-reminder screen."""

from __future__ import annotations

from dataclasses import dataclass


class TemplateCategory:
    """Category names used to group templates."""

    PERSONAL = "personal"
    HEALTH = "health"
    CHARITY = "charity"
    SPIRITUAL = "spiritual"
    WORK = "work"
    CUSTOM = "custom"

    ALL = (PERSONAL, HEALTH, CHARITY, SPIRITUAL, WORK, CUSTOM)

    @classmethod
    def is_valid(cls, category: str) -> bool:
        return category in cls.ALL


@dataclass(frozen=True)
class ReminderTemplate:
    """A prefilled reminder title."""

    id: str
    title: str
    category: str
    is_custom: bool = False

    def is_valid(self) -> bool:
        return bool(self.id) and bool(self.title) and bool(self.category)
