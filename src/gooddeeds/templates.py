"""Quick reminder templates offered when creating a reminder."""

from __future__ import annotations

import logging
import random

from gooddeeds.models import ReminderTemplate, TemplateCategory

logger = logging.getLogger(__name__)

__all__ = ["TemplateService", "PREDEFINED_TEMPLATES"]

MINIMUM_TEMPLATES = 20

PREDEFINED_TEMPLATES: tuple[ReminderTemplate, ...] = (
    # Personal & family
    ReminderTemplate("call_mom", "Call mom", TemplateCategory.PERSONAL),
    ReminderTemplate("call_dad", "Call dad", TemplateCategory.PERSONAL),
    ReminderTemplate("visit_family", "Visit family", TemplateCategory.PERSONAL),
    ReminderTemplate(
        "check_elderly_relatives", "Check on elderly relatives", TemplateCategory.PERSONAL
    ),
    ReminderTemplate("message_siblings", "Send message to siblings", TemplateCategory.PERSONAL),
    ReminderTemplate("plan_family_gathering", "Plan family gathering", TemplateCategory.PERSONAL),
    # Health & wellness
    ReminderTemplate("take_medication", "Take medication", TemplateCategory.HEALTH),
    ReminderTemplate("drink_water", "Drink water", TemplateCategory.HEALTH),
    ReminderTemplate("exercise", "Exercise", TemplateCategory.HEALTH),
    ReminderTemplate("go_for_walk", "Go for a walk", TemplateCategory.HEALTH),
    ReminderTemplate("get_enough_sleep", "Take a 20 minute nap", TemplateCategory.HEALTH),
    # Charity & good deeds
    ReminderTemplate("give_food_to_poor", "Give food to poor", TemplateCategory.CHARITY),
    ReminderTemplate("visit_sick", "Visit the sick", TemplateCategory.CHARITY),
    ReminderTemplate("help_neighbor", "Help a neighbor", TemplateCategory.CHARITY),
    ReminderTemplate("donate_to_charity", "Donate to charity", TemplateCategory.CHARITY),
    # Spiritual
    ReminderTemplate("read_quran", "Read one page of Quran", TemplateCategory.SPIRITUAL),
    ReminderTemplate("make_dua", "Ask Allah for forgiveness", TemplateCategory.SPIRITUAL),
    ReminderTemplate("pray_on_time", "Pray on time", TemplateCategory.SPIRITUAL),
    # Work & productivity
    ReminderTemplate("pay_bills", "Pay bills", TemplateCategory.WORK),
    ReminderTemplate("review_daily_goals", "Review daily goals", TemplateCategory.WORK),
)

CUSTOM_TEMPLATE = ReminderTemplate("custom", "Custom", TemplateCategory.CUSTOM, is_custom=True)
CLEAR_TEMPLATE = ReminderTemplate("clear", "Clear", TemplateCategory.CUSTOM, is_custom=True)
FALLBACK_GOOD_DEED = ReminderTemplate(
    "fallback_good_deed", "Do a good deed", TemplateCategory.CHARITY
)


class TemplateService:
    """
    Lookup over the predefined templates.

    Args:
        templates: Templates to serve (the predefined set by default)
    """

    def __init__(self, templates: tuple[ReminderTemplate, ...] = PREDEFINED_TEMPLATES):
        invalid = [t for t in templates if not t.is_valid()]
        if invalid:
            logger.warning(f"Ignoring {len(invalid)} invalid template(s): {invalid}")
        self._templates = tuple(t for t in templates if t.is_valid())
        self._by_id = {t.id: t for t in self._templates}

    def predefined(self) -> list[ReminderTemplate]:
        return list(self._templates)

    def by_category(self, category: str) -> list[ReminderTemplate]:
        """Templates in a category; empty for an unknown category."""
        if not TemplateCategory.is_valid(category):
            return []
        return [t for t in self._templates if t.category == category]

    def grouped_by_category(self) -> dict[str, list[ReminderTemplate]]:
        grouped: dict[str, list[ReminderTemplate]] = {}
        for template in self._templates:
            grouped.setdefault(template.category, []).append(template)
        return grouped

    def custom_template(self) -> ReminderTemplate:
        return CUSTOM_TEMPLATE

    def clear_template(self) -> ReminderTemplate:
        return CLEAR_TEMPLATE

    def all_templates(self) -> list[ReminderTemplate]:
        """Predefined templates followed by the custom option."""
        return [*self._templates, CUSTOM_TEMPLATE]

    def get(self, template_id: str) -> ReminderTemplate | None:
        if template_id == CUSTOM_TEMPLATE.id:
            return CUSTOM_TEMPLATE
        if template_id == CLEAR_TEMPLATE.id:
            return CLEAR_TEMPLATE
        return self._by_id.get(template_id)

    def count(self) -> int:
        return len(self._templates)

    def has_minimum_templates(self) -> bool:
        return len(self._templates) >= MINIMUM_TEMPLATES

    def random_good_deed(self, rng: random.Random | None = None) -> ReminderTemplate:
        """Pick a template to prefill the title field."""
        if not self._templates:
            return FALLBACK_GOOD_DEED
        return (rng or random).choice(self._templates)
