"""Service for the daily activity log and the day index."""
import logging
from typing import Any, List, Optional

from vocabtrack.models.record_models import (
    DayActivityRecord,
    DayIndexEntry,
    DayWordEvent,
    PracticeMode,
    current_date,
    current_timestamp,
)
from vocabtrack.services.base_service import StoreBackedService
from vocabtrack.services.kv_store import DAY_INDEX_KEY, day_record_key

logger = logging.getLogger(__name__)


def parse_day_index(data: Any) -> List[DayIndexEntry]:
    return [DayIndexEntry.from_data(entry) for entry in data]


class DayRecordService(StoreBackedService):
    """Time-indexed log of practice events.

    The log answers "what happened on day X" without scanning every chapter
    shard. Counters stay authoritative in the record store; this service only
    appends events and maintains the list of days that have any.
    """

    async def ensure_today_record(self, practice_mode: PracticeMode = PracticeMode.NORMAL) -> None:
        """Create today's record for the mode if missing and index today."""
        today = current_date()
        key = day_record_key(today, practice_mode)
        result = await self._load(key, DayActivityRecord.from_data)
        if result.failed:
            logger.warning(f"Skipping creation of {key}, existing record could not be read")
            return
        if not result.found:
            if await self._save(key, DayActivityRecord(date=today).to_data()):
                logger.info(f"Created day record {key}")
        await self.update_total_records(today)

    async def update_total_records(self, date: str) -> None:
        """Add ``date`` to the day index with analysisGenerated=false unless already indexed."""
        result = await self._load(DAY_INDEX_KEY, parse_day_index)
        if result.failed:
            logger.warning(f"Day index unreadable, {date} not indexed")
            return
        entries = result.value or []
        if any(entry.date == date for entry in entries):
            return
        entries.append(DayIndexEntry(date=date, analysis_generated=False))
        entries.sort(key=lambda entry: entry.date)
        if await self._save(DAY_INDEX_KEY, [entry.to_data() for entry in entries]):
            logger.info(f"Indexed day {date}")

    async def record_word_practice(
        self,
        dict_id: str,
        dict_name: str,
        chapter_number: int,
        word: str,
        is_correct: bool,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
        translation: str = "",
        phonetics: str = "",
    ) -> None:
        """Append one practice attempt to today's record."""
        today = current_date()
        key = day_record_key(today, practice_mode)
        result = await self._load(key, DayActivityRecord.from_data)
        if result.failed:
            logger.warning(f"Dropping practice event for '{word}', {key} could not be read")
            return

        day_record = result.value or DayActivityRecord(date=today)
        day_record.words.append(
            DayWordEvent(
                word=word,
                translation=translation,
                phonetics=phonetics,
                dict_id=dict_id,
                dict_name=dict_name,
                chapter_number=chapter_number,
                practice_time=current_timestamp(),
                is_correct=is_correct,
            )
        )
        saved = await self._save(key, day_record.to_data())
        if saved and not result.found:
            await self.update_total_records(today)

    async def get_day_record(
        self, date: str, practice_mode: PracticeMode = PracticeMode.NORMAL
    ) -> Optional[DayActivityRecord]:
        """Get the record of a date, None if absent or unreadable."""
        result = await self._load(day_record_key(date, practice_mode), DayActivityRecord.from_data)
        return result.value

    async def get_current_day_record(
        self, practice_mode: PracticeMode = PracticeMode.NORMAL
    ) -> Optional[DayActivityRecord]:
        return await self.get_day_record(current_date(), practice_mode)

    async def get_total_records(self) -> List[DayIndexEntry]:
        """Get the day index, empty if absent or unreadable."""
        result = await self._load(DAY_INDEX_KEY, parse_day_index)
        return result.value or []

    async def get_date_list(self) -> List[str]:
        """Indexed dates, newest first."""
        entries = await self.get_total_records()
        return sorted((entry.date for entry in entries), reverse=True)

    async def set_analysis_generated(self, date: str, generated: bool = True) -> bool:
        """Flag an indexed date. Unknown dates are left alone."""
        result = await self._load(DAY_INDEX_KEY, parse_day_index)
        if result.failed or not result.found:
            return False
        entries = result.value
        entry = next((entry for entry in entries if entry.date == date), None)
        if entry is None:
            logger.warning(f"Date {date} is not in the day index")
            return False
        entry.analysis_generated = generated
        return await self._save(DAY_INDEX_KEY, [entry.to_data() for entry in entries])
