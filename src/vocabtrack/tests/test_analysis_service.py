"""Tests for the analysis service."""
from unittest.mock import AsyncMock, patch

import pytest
from faker import Faker

from vocabtrack.exceptions import StoreError
from vocabtrack.models.record_models import DayIndexEntry, PracticeMode
from vocabtrack.services.analysis_service import AnalysisService
from vocabtrack.services.day_record_service import DayRecordService
from vocabtrack.services.kv_store import SQLAlchemyKeyValueStore, analysis_key
from vocabtrack.services.record_service import RecordService

fake = Faker()

TODAY = "2024-05-01"


@pytest.fixture
def day_record_service(store: SQLAlchemyKeyValueStore) -> DayRecordService:
    return DayRecordService(store)


@pytest.fixture
def record_service(store: SQLAlchemyKeyValueStore, day_record_service: DayRecordService) -> RecordService:
    return RecordService(store, day_record_service)


@pytest.fixture
def analysis_service(
    store: SQLAlchemyKeyValueStore, record_service: RecordService, day_record_service: DayRecordService
) -> AnalysisService:
    """Create an analysis service sharing the record services."""
    return AnalysisService(store, record_service, day_record_service)


@pytest.fixture(autouse=True)
def fixed_today():
    with patch("vocabtrack.services.day_record_service.current_date", return_value=TODAY), \
         patch("vocabtrack.services.analysis_service.current_date", return_value=TODAY):
        yield


async def _practice(record_service: RecordService, dict_id: str, chapter: int, word: str, *answers: bool,
                    mode: PracticeMode = PracticeMode.NORMAL, dict_name: str = "CET-4") -> None:
    for is_correct in answers:
        await record_service.record_word_practice(
            dict_id, chapter, word, is_correct, mode, dict_name=dict_name, translation=f"{word}-t"
        )


@pytest.mark.asyncio
async def test_generate_analysis_mixes_day_and_cumulative_stats(
    analysis_service: AnalysisService, record_service: RecordService
) -> None:
    # Practice before the tracked day only reaches the shards
    await record_service.record_word_practice("cet4", 1, "remote", True)
    await record_service.load_main_record("cet4", "CET-4", 95)
    await _practice(record_service, "cet4", 1, "remote", True, False)
    await _practice(record_service, "cet4", 1, "remove", True)

    report = await analysis_service.generate_analysis(TODAY)

    chapter = report.normal_mode.dicts["cet4"].chapters[1]
    remote = next(w for w in chapter.words if w.word == "remote")
    assert [w.word for w in chapter.words] == ["remote", "remove"]
    assert remote.attempts_today == 2
    assert remote.correct_today == 1
    assert remote.practice_count == 3
    assert remote.correct_count == 2
    assert remote.translation == "remote-t"
    assert chapter.chapter_completion_count == 1
    assert report.dictation_mode is None
    assert report.summary.dicts[0].total_words_in_dict == 95


@pytest.mark.asyncio
async def test_summary_counts_both_modes(analysis_service: AnalysisService, record_service: RecordService) -> None:
    await _practice(record_service, "cet4", 1, "remote", True)
    await _practice(record_service, "cet4", 2, "private", True)
    await _practice(record_service, "cet4", 1, "remote", False, mode=PracticeMode.DICTATION)
    await _practice(record_service, "gre", 5, "abate", True, dict_name="GRE")

    report = await analysis_service.generate_analysis(TODAY)
    summary = report.summary

    assert summary.total_dicts == 2
    assert summary.total_chapters == 4
    assert summary.total_words == 4
    cet4 = next(d for d in summary.dicts if d.dict_id == "cet4")
    assert (cet4.normal_mode.chapters, cet4.normal_mode.words) == (2, 2)
    assert (cet4.dictation_mode.chapters, cet4.dictation_mode.words) == (1, 1)
    assert cet4.total_words_in_dict == 0


@pytest.mark.asyncio
async def test_generate_analysis_persists_and_flags(
    analysis_service: AnalysisService, record_service: RecordService, day_record_service: DayRecordService
) -> None:
    await _practice(record_service, "cet4", 1, "remote", True)

    report = await analysis_service.generate_analysis(TODAY)

    assert await analysis_service.get_analysis(TODAY) == report
    assert await day_record_service.get_total_records() == [DayIndexEntry(TODAY, True)]


@pytest.mark.asyncio
async def test_generate_analysis_for_quiet_day(analysis_service: AnalysisService) -> None:
    report = await analysis_service.generate_analysis("2024-04-01")

    assert report.normal_mode is None
    assert report.dictation_mode is None
    assert report.summary.total_dicts == 0
    assert await analysis_service.get_analysis("2024-04-01") == report


@pytest.mark.asyncio
async def test_generate_analysis_store_failure(
    analysis_service: AnalysisService, store: SQLAlchemyKeyValueStore
) -> None:
    await store.set(analysis_key("2024-01-01"), {"stale": True})
    store.set = AsyncMock(side_effect=StoreError("read-only"))

    assert await analysis_service.generate_analysis("2024-01-01") is None
    assert await analysis_service.get_analysis("2024-01-01") is None


@pytest.mark.asyncio
async def test_backfill_generates_most_recent_past_day_only(
    analysis_service: AnalysisService, day_record_service: DayRecordService
) -> None:
    for date in ("2024-01-01", "2024-01-02", TODAY):
        await day_record_service.update_total_records(date)

    processed = await analysis_service.check_and_generate_missing_analysis()

    assert processed == "2024-01-02"
    assert await analysis_service.get_analysis("2024-01-02") is not None
    assert await analysis_service.get_analysis("2024-01-01") is None
    assert await analysis_service.get_analysis(TODAY) is None
    flags = {entry.date: entry.analysis_generated for entry in await day_record_service.get_total_records()}
    assert flags == {"2024-01-01": False, "2024-01-02": True, TODAY: False}

    assert await analysis_service.check_and_generate_missing_analysis() == "2024-01-01"
    assert await analysis_service.check_and_generate_missing_analysis() is None


@pytest.mark.asyncio
async def test_backfill_uses_given_index(analysis_service: AnalysisService) -> None:
    entries = [DayIndexEntry("2024-02-01", True), DayIndexEntry("2024-02-03", False), DayIndexEntry("2024-06-01", False)]

    with patch.object(analysis_service, "generate_analysis", AsyncMock()) as generate:
        processed = await analysis_service.check_and_generate_missing_analysis(entries)

    assert processed == "2024-02-03"
    generate.assert_awaited_once_with("2024-02-03")


@pytest.mark.asyncio
async def test_backfill_with_empty_index(analysis_service: AnalysisService) -> None:
    with patch.object(analysis_service, "generate_analysis", AsyncMock()) as generate:
        assert await analysis_service.check_and_generate_missing_analysis([]) is None
    generate.assert_not_called()


@pytest.mark.asyncio
async def test_get_dict_overview(analysis_service: AnalysisService, record_service: RecordService) -> None:
    dict_id = fake.slug()
    await record_service.load_main_record(dict_id, "CET-4", 25)
    await _practice(record_service, dict_id, 1, "remote", True, True, False)
    await _practice(record_service, dict_id, 3, "private", True)

    overview = await analysis_service.get_dict_overview(dict_id, "CET-4", 25)

    assert overview.total_chapters == 3
    assert [stats.chapter for stats in overview.chapters] == [1, 2, 3]
    assert overview.total_practice_count == 4
    assert overview.total_correct_count == 3
    assert overview.total_error_count == 1
    assert overview.total_completed_words == 2
    assert overview.overall_correct_rate == 75
    assert overview.chapters[1].practice_count == 0
    assert overview.chapters[0].completion_count == 2
