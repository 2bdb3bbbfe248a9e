"""Tests for reminder templates and snooze delay options."""

import random
from datetime import timedelta

import pytest

from gooddeeds.models import DelayOption, ReminderTemplate, TemplateCategory
from gooddeeds.models.delay import format_duration
from gooddeeds.templates import (
    CLEAR_TEMPLATE,
    CUSTOM_TEMPLATE,
    FALLBACK_GOOD_DEED,
    PREDEFINED_TEMPLATES,
    TemplateService,
)


@pytest.fixture
def service() -> TemplateService:
    return TemplateService()


# =============================================================================
# Templates
# =============================================================================


def test_predefined_set(service):
    assert service.count() == 20
    assert service.has_minimum_templates()
    assert len({t.id for t in PREDEFINED_TEMPLATES}) == len(PREDEFINED_TEMPLATES)
    assert all(t.is_valid() and not t.is_custom for t in service.predefined())


@pytest.mark.parametrize(
    "category,count",
    [
        (TemplateCategory.PERSONAL, 6),
        (TemplateCategory.HEALTH, 5),
        (TemplateCategory.CHARITY, 4),
        (TemplateCategory.SPIRITUAL, 3),
        (TemplateCategory.WORK, 2),
        (TemplateCategory.CUSTOM, 0),
        ("gardening", 0),
    ],
)
def test_by_category(service, category, count):
    templates = service.by_category(category)
    assert len(templates) == count
    assert all(t.category == category for t in templates)


def test_grouped_by_category_keeps_order(service):
    grouped = service.grouped_by_category()
    assert list(grouped) == [
        TemplateCategory.PERSONAL,
        TemplateCategory.HEALTH,
        TemplateCategory.CHARITY,
        TemplateCategory.SPIRITUAL,
        TemplateCategory.WORK,
    ]
    assert grouped[TemplateCategory.PERSONAL][0].title == "Call mom"


def test_all_templates_ends_with_custom(service):
    everything = service.all_templates()
    assert everything[-1] is CUSTOM_TEMPLATE
    assert len(everything) == service.count() + 1


def test_get(service):
    assert service.get("drink_water").title == "Drink water"
    assert service.get("custom") is CUSTOM_TEMPLATE
    assert service.get("clear") is CLEAR_TEMPLATE
    assert service.get("nope") is None
    assert service.custom_template().is_custom
    assert service.clear_template().is_custom


def test_invalid_templates_are_dropped():
    service = TemplateService(
        (
            ReminderTemplate("ok", "Fine", TemplateCategory.WORK),
            ReminderTemplate("", "No id", TemplateCategory.WORK),
            ReminderTemplate("no_title", "", TemplateCategory.WORK),
        )
    )
    assert [t.id for t in service.predefined()] == ["ok"]
    assert not service.has_minimum_templates()


def test_random_good_deed(service):
    rng = random.Random(42)
    picks = {service.random_good_deed(rng) for _ in range(50)}
    assert picks <= set(PREDEFINED_TEMPLATES)


def test_random_good_deed_with_no_templates():
    assert TemplateService(()).random_good_deed() is FALLBACK_GOOD_DEED


def test_category_validation():
    assert TemplateCategory.is_valid("health")
    assert not TemplateCategory.is_valid("Health")


# =============================================================================
# Delay options
# =============================================================================


def test_presets():
    ids = [option.id for option in DelayOption.PRESETS]
    assert ids == ["1min", "5min", "15min", "1hr", "custom"]
    assert [o.is_custom for o in DelayOption.PRESETS] == [False] * 4 + [True]


@pytest.mark.parametrize(
    "duration,text",
    [
        (timedelta(seconds=0), "0 seconds"),
        (timedelta(seconds=45), "45 seconds"),
        (timedelta(minutes=1), "1 minute"),
        (timedelta(minutes=15), "15 minutes"),
        (timedelta(hours=1), "1 hour"),
        (timedelta(hours=1, minutes=30), "1h 30m"),
        (timedelta(hours=3), "3 hours"),
        (timedelta(days=1, hours=5), "1 day"),
        (timedelta(days=2), "2 days"),
    ],
)
def test_format_duration(duration, text):
    assert format_duration(duration) == text


def test_custom_option_display():
    custom = DelayOption.PRESETS[-1]
    assert custom.display_text == "Custom time"

    chosen = custom.with_duration(timedelta(hours=2, minutes=15))
    assert chosen.is_custom
    assert chosen.id == "custom"
    assert chosen.label == "2h 15m"
    assert chosen.display_text == "2h 15m"
    assert custom.duration == timedelta(0)


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        DelayOption.PRESETS[-1].with_duration(timedelta(minutes=-5))
