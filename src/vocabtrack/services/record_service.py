"""Record service for dictionary main records and per-chapter shards."""
import logging
from functools import partial
from typing import Optional

from vocabtrack.models.record_models import (
    ChapterRecord,
    DictMainRecord,
    PracticeMode,
    WordRecord,
    current_timestamp,
)
from vocabtrack.monitoring import chapter_completions, practice_events
from vocabtrack.services.base_service import LoadResult, StoreBackedService
from vocabtrack.services.day_record_service import DayRecordService
from vocabtrack.services.kv_store import KeyValueStore, chapter_record_key, main_record_key

logger = logging.getLogger(__name__)


class RecordService(StoreBackedService):
    """Sharded progress storage: one main record per dictionary and mode,
    one shard per chapter holding the word counters.
    """

    def __init__(self, store: KeyValueStore, day_record_service: Optional[DayRecordService] = None):
        """Initialize the service with a store and the daily log practice events are forwarded to."""
        super().__init__(store)
        self.day_record_service = day_record_service or DayRecordService(store)

    async def load_main_record(
        self,
        dict_id: str,
        dict_name: str,
        total_words: int,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> DictMainRecord:
        """Load the main record, creating it on first use.

        A changed word count is written back before the record is returned.
        """
        result = await self._load_main(dict_id, practice_mode)
        if result.found:
            record = result.value
            if record.sync_total_words(total_words):
                logger.info(
                    f"Word count of {dict_id} ({practice_mode.value}) changed, "
                    f"now {record.total_words} words in {record.total_chapters} chapters"
                )
                await self.save_main_record(record)
            return record

        if result.failed:
            logger.warning(f"Using a default main record for {dict_id} ({practice_mode.value})")
        record = DictMainRecord.create_default(dict_id, dict_name, total_words, practice_mode)
        await self.save_main_record(record)
        return record

    async def find_main_record(
        self, dict_id: str, practice_mode: PracticeMode = PracticeMode.NORMAL
    ) -> Optional[DictMainRecord]:
        """Get the stored main record without creating or correcting it."""
        result = await self._load_main(dict_id, practice_mode)
        return result.value

    async def _load_main(self, dict_id: str, practice_mode: PracticeMode) -> LoadResult[DictMainRecord]:
        # Mode comes from the key, never from the stored document
        return await self._load(
            main_record_key(dict_id, practice_mode),
            partial(DictMainRecord.from_data, practice_mode=practice_mode),
        )

    async def save_main_record(self, record: DictMainRecord) -> None:
        await self._save(main_record_key(record.dict_id, record.practice_mode), record.to_data())

    async def load_chapter_record(
        self,
        dict_id: str,
        chapter_number: int,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> ChapterRecord:
        """Load a shard, or an empty default that is not persisted."""
        result = await self._load(
            chapter_record_key(dict_id, chapter_number, practice_mode), ChapterRecord.from_data
        )
        return result.value or ChapterRecord(chapter_number=chapter_number)

    async def save_chapter_record(
        self,
        dict_id: str,
        record: ChapterRecord,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> None:
        await self._save(chapter_record_key(dict_id, record.chapter_number, practice_mode), record.to_data())

    async def record_word_practice(
        self,
        dict_id: str,
        chapter_number: int,
        word: str,
        is_correct: bool,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
        dict_name: str = "",
        translation: str = "",
        phonetics: str = "",
    ) -> None:
        """Count one answer for a word and forward it to the daily log.

        The daily log lives under its own key, so it still receives the event
        when the chapter shard cannot be read.
        """
        await self._count_answer(dict_id, chapter_number, word, is_correct, practice_mode)

        if dict_name:
            await self.day_record_service.record_word_practice(
                dict_id,
                dict_name,
                chapter_number,
                word,
                is_correct,
                practice_mode,
                translation=translation,
                phonetics=phonetics,
            )

    async def _count_answer(
        self,
        dict_id: str,
        chapter_number: int,
        word: str,
        is_correct: bool,
        practice_mode: PracticeMode,
    ) -> None:
        key = chapter_record_key(dict_id, chapter_number, practice_mode)
        result = await self._load(key, ChapterRecord.from_data)
        if result.failed:
            # An unreadable shard is never overwritten
            logger.warning(f"Not counting '{word}', shard {key} could not be read")
            return

        chapter_record = result.value or ChapterRecord(chapter_number=chapter_number)
        was_empty = chapter_record.is_empty()

        word_record = chapter_record.word_records.get(word)
        if word_record is None:
            word_record = WordRecord(word=word)
            chapter_record.word_records[word] = word_record
        word_record.record_attempt(is_correct)

        chapter_record.recalculate()
        chapter_record.last_practice_time = current_timestamp()

        if not (was_empty and chapter_record.is_empty()):
            await self.save_chapter_record(dict_id, chapter_record, practice_mode)
        practice_events.labels(
            mode=practice_mode.value, result="correct" if is_correct else "error"
        ).inc()
        logger.debug(
            f"Recorded {'correct' if is_correct else 'wrong'} answer for '{word}' "
            f"in {dict_id} chapter {chapter_number} ({practice_mode.value})"
        )

    async def record_chapter_completion(
        self,
        dict_id: str,
        chapter_number: int,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> None:
        """Recompute the completion aggregates of a shard that already has word records."""
        result = await self._load(
            chapter_record_key(dict_id, chapter_number, practice_mode), ChapterRecord.from_data
        )
        if not result.found or result.value.is_empty():
            return
        chapter_record = result.value
        chapter_record.recalculate()
        chapter_record.last_practice_time = current_timestamp()
        await self.save_chapter_record(dict_id, chapter_record, practice_mode)
        chapter_completions.labels(mode=practice_mode.value).inc()

    async def update_current_position(
        self,
        dict_id: str,
        chapter_number: int,
        word_index: int,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> None:
        """Store the learner's position in the main record."""
        record = await self.find_main_record(dict_id, practice_mode)
        if record is None:
            logger.warning(f"No main record for {dict_id} ({practice_mode.value}), position not saved")
            return
        if chapter_number < 1 or word_index < 0 or (
            record.total_chapters and chapter_number > record.total_chapters
        ):
            logger.warning(
                f"Ignoring out-of-range position chapter {chapter_number}, index {word_index} for {dict_id}"
            )
            return
        record.current_chapter = chapter_number
        record.current_word_index = word_index
        record.last_practice_time = current_timestamp()
        await self.save_main_record(record)

    async def update_chapter_loop(
        self,
        dict_id: str,
        chapter_loop: bool,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> None:
        record = await self.find_main_record(dict_id, practice_mode)
        if record is None:
            logger.warning(f"No main record for {dict_id} ({practice_mode.value}), chapter loop not saved")
            return
        record.chapter_loop = chapter_loop
        record.last_practice_time = current_timestamp()
        await self.save_main_record(record)

    async def get_chapter_stats(
        self,
        dict_id: str,
        chapter_number: int,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> Optional[ChapterRecord]:
        """Get a shard for display, None if it could not be read."""
        result = await self._load(
            chapter_record_key(dict_id, chapter_number, practice_mode), ChapterRecord.from_data
        )
        if result.failed:
            return None
        return result.value or ChapterRecord(chapter_number=chapter_number)

    async def get_word_stats(
        self,
        dict_id: str,
        chapter_number: int,
        word: str,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> Optional[WordRecord]:
        chapter_record = await self.load_chapter_record(dict_id, chapter_number, practice_mode)
        return chapter_record.word_records.get(word)
