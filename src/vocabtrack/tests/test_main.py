"""Tests for the activation entry point."""
from unittest.mock import patch

import pytest

from vocabtrack.__main__ import activate
from vocabtrack.models.record_models import DayIndexEntry, PracticeMode
from vocabtrack.services.analysis_service import AnalysisService
from vocabtrack.services.day_record_service import DayRecordService
from vocabtrack.services.kv_store import MemoryKeyValueStore, SQLAlchemyKeyValueStore


def at_date(date: str):
    return patch("vocabtrack.services.day_record_service.current_date", return_value=date), \
        patch("vocabtrack.services.analysis_service.current_date", return_value=date)


@pytest.mark.asyncio
async def test_activate_prepares_today(store: SQLAlchemyKeyValueStore) -> None:
    day_patch, analysis_patch = at_date("2024-05-01")
    with day_patch, analysis_patch:
        await activate(store)

    day_record_service = DayRecordService(store)
    assert await day_record_service.get_day_record("2024-05-01", PracticeMode.NORMAL) is not None
    assert await day_record_service.get_day_record("2024-05-01", PracticeMode.DICTATION) is not None
    assert await day_record_service.get_total_records() == [DayIndexEntry("2024-05-01", False)]


@pytest.mark.asyncio
async def test_each_activation_backfills_one_day() -> None:
    store = MemoryKeyValueStore(namespace="")
    day_record_service = DayRecordService(store)
    analysis_service = AnalysisService(store, day_record_service=day_record_service)
    for date in ("2024-04-28", "2024-04-29"):
        await day_record_service.update_total_records(date)

    day_patch, analysis_patch = at_date("2024-05-01")
    with day_patch, analysis_patch:
        await activate(store)
        assert await analysis_service.get_analysis("2024-04-29") is not None
        assert await analysis_service.get_analysis("2024-04-28") is None

        await activate(store)
        assert await analysis_service.get_analysis("2024-04-28") is not None

    flags = [entry.analysis_generated for entry in await day_record_service.get_total_records()]
    assert flags == [True, True, False]
