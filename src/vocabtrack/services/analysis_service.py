"""Analysis service rolling daily activity into per-day reports."""
import logging
from typing import Dict, List, Optional, Tuple

from vocabtrack.models.analysis_models import (
    AnalysisReport,
    AnalysisSummary,
    ChapterAnalysis,
    ChapterStats,
    DictAnalysis,
    DictOverview,
    DictSummary,
    ModeAnalysis,
    ModeTotals,
    WordAnalysis,
)
from vocabtrack.models.record_models import (
    ChapterRecord,
    DayActivityRecord,
    DayIndexEntry,
    PracticeMode,
    current_date,
    current_timestamp,
)
from vocabtrack.monitoring import analyses_generated, analysis_duration
from vocabtrack.services.base_service import StoreBackedService
from vocabtrack.services.day_record_service import DayRecordService
from vocabtrack.services.kv_store import KeyValueStore, analysis_key
from vocabtrack.services.record_service import RecordService

logger = logging.getLogger(__name__)

ChapterCache = Dict[Tuple[str, PracticeMode, int], ChapterRecord]


class AnalysisService(StoreBackedService):
    """Builds daily analysis reports and dictionary overviews.

    Reports combine what happened on the day (from the daily log) with the
    cumulative word statistics of the chapter shards at generation time.
    The service reads counters but never changes them.
    """

    def __init__(
        self,
        store: KeyValueStore,
        record_service: Optional[RecordService] = None,
        day_record_service: Optional[DayRecordService] = None,
    ):
        super().__init__(store)
        self.day_record_service = day_record_service or DayRecordService(store)
        self.record_service = record_service or RecordService(store, self.day_record_service)

    async def generate_analysis(self, date: str) -> Optional[AnalysisReport]:
        """Build, persist and flag the report of a date. None if it could not be stored."""
        with analysis_duration.time():
            normal_record = await self.day_record_service.get_day_record(date, PracticeMode.NORMAL)
            dictation_record = await self.day_record_service.get_day_record(date, PracticeMode.DICTATION)

            chapter_cache: ChapterCache = {}
            report = AnalysisReport(date=date, generated_at=current_timestamp())
            if normal_record is not None:
                report.normal_mode = await self._analyse_mode(normal_record, PracticeMode.NORMAL, chapter_cache)
            if dictation_record is not None:
                report.dictation_mode = await self._analyse_mode(
                    dictation_record, PracticeMode.DICTATION, chapter_cache
                )
            report.summary = await self._summarize(report)

            if not await self._save(analysis_key(date), report.to_data()):
                logger.error(f"Analysis for {date} could not be stored")
                return None

        await self.day_record_service.set_analysis_generated(date, True)
        analyses_generated.inc()
        logger.info(
            f"Generated analysis for {date}: {report.summary.total_dicts} dicts, "
            f"{report.summary.total_chapters} chapters, {report.summary.total_words} words"
        )
        return report

    async def _load_chapter(
        self, dict_id: str, practice_mode: PracticeMode, chapter_number: int, cache: ChapterCache
    ) -> ChapterRecord:
        key = (dict_id, practice_mode, chapter_number)
        if key not in cache:
            cache[key] = await self.record_service.load_chapter_record(dict_id, chapter_number, practice_mode)
        return cache[key]

    async def _analyse_mode(
        self, day_record: DayActivityRecord, practice_mode: PracticeMode, cache: ChapterCache
    ) -> ModeAnalysis:
        mode_analysis = ModeAnalysis()
        events_by_word = day_record.events_by_word()
        for dict_id, dict_words in day_record.practiced_words().items():
            dict_analysis = DictAnalysis(dict_id=dict_id, dict_name=dict_words.dict_name)
            for chapter_number, words in dict_words.chapters.items():
                chapter_record = await self._load_chapter(dict_id, practice_mode, chapter_number, cache)
                chapter = ChapterAnalysis(
                    chapter_number=chapter_number,
                    chapter_completion_count=chapter_record.chapter_completion_count,
                )
                for word in words:
                    events = events_by_word[(dict_id, chapter_number, word)]
                    latest = events[-1]
                    stats = chapter_record.word_records.get(word)
                    analysis = WordAnalysis(
                        word=word,
                        translation=latest.translation,
                        phonetics=latest.phonetics,
                        attempts_today=len(events),
                        correct_today=sum(1 for event in events if event.is_correct),
                    )
                    if stats is not None:
                        analysis.practice_count = stats.practice_count
                        analysis.correct_count = stats.correct_count
                        analysis.error_count = stats.error_count
                        analysis.correct_rate = stats.correct_rate
                        analysis.last_practice_time = stats.last_practice_time
                    chapter.words.append(analysis)
                dict_analysis.chapters[chapter_number] = chapter
            mode_analysis.dicts[dict_id] = dict_analysis
        return mode_analysis

    async def _summarize(self, report: AnalysisReport) -> AnalysisSummary:
        summaries: Dict[str, DictSummary] = {}
        for practice_mode, mode_analysis in (
            (PracticeMode.NORMAL, report.normal_mode),
            (PracticeMode.DICTATION, report.dictation_mode),
        ):
            if mode_analysis is None:
                continue
            for dict_id, dict_analysis in mode_analysis.dicts.items():
                summary = summaries.get(dict_id)
                if summary is None:
                    summary = DictSummary(
                        dict_id=dict_id,
                        dict_name=dict_analysis.dict_name,
                        total_words_in_dict=await self._total_words_in_dict(dict_id),
                    )
                    summaries[dict_id] = summary
                totals = ModeTotals(
                    chapters=len(dict_analysis.chapters),
                    words=sum(chapter.word_count for chapter in dict_analysis.chapters.values()),
                )
                if practice_mode == PracticeMode.NORMAL:
                    summary.normal_mode = totals
                else:
                    summary.dictation_mode = totals
        return AnalysisSummary(dicts=list(summaries.values()))

    async def _total_words_in_dict(self, dict_id: str) -> int:
        for practice_mode in PracticeMode:
            record = await self.record_service.find_main_record(dict_id, practice_mode)
            if record is not None:
                return record.total_words
        return 0

    async def check_and_generate_missing_analysis(
        self, total_records: Optional[List[DayIndexEntry]] = None
    ) -> Optional[str]:
        """Generate the report of the most recent past day that lacks one.

        Only one day is processed per call; dates from today on are skipped.
        Returns the processed date, or None when nothing was pending.
        """
        if total_records is None:
            total_records = await self.day_record_service.get_total_records()
        today = current_date()
        for entry in sorted(total_records, key=lambda entry: entry.date, reverse=True):
            if entry.date >= today or entry.analysis_generated:
                continue
            logger.info(f"Backfilling missing analysis for {entry.date}")
            await self.generate_analysis(entry.date)
            return entry.date
        return None

    async def get_analysis(self, date: str) -> Optional[AnalysisReport]:
        result = await self._load(analysis_key(date), AnalysisReport.from_data)
        return result.value

    async def get_dict_overview(
        self,
        dict_id: str,
        dict_name: str,
        total_words: int,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> DictOverview:
        """Cumulative dictionary statistics computed from all of its chapter shards."""
        main_record = await self.record_service.load_main_record(dict_id, dict_name, total_words, practice_mode)
        overview = DictOverview(
            dict_id=dict_id,
            dict_name=main_record.dict_name,
            total_words=main_record.total_words,
            total_chapters=main_record.total_chapters,
            practice_mode=main_record.practice_mode.value,
            chapter_loop=main_record.chapter_loop,
        )
        for chapter_number in range(1, main_record.total_chapters + 1):
            chapter_record = await self.record_service.load_chapter_record(dict_id, chapter_number, practice_mode)
            overview.total_practice_count += chapter_record.practice_count
            overview.total_correct_count += chapter_record.correct_count
            overview.total_error_count += chapter_record.error_count
            overview.total_completed_words += chapter_record.completed_words_count
            overview.chapters.append(
                ChapterStats(
                    chapter=chapter_number,
                    total_words=chapter_record.total_words_in_chapter,
                    practice_count=chapter_record.practice_count,
                    error_count=chapter_record.error_count,
                    correct_rate=chapter_record.correct_rate,
                    completion_count=chapter_record.chapter_completion_count,
                )
            )
        return overview
