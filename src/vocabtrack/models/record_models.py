"""Models for the persisted progress records.

Every record keeps snake_case attributes in Python and converts to the
camelCase JSON document stored in the key-value namespace through
``to_data()`` / ``from_data()``.
"""
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from vocabtrack.config import WORDS_PER_CHAPTER


class PracticeMode(Enum):
    """Independent progress tracks over the same word list."""
    NORMAL = "normal"  # recognition
    DICTATION = "dictation"  # recall


def current_timestamp() -> str:
    """Full ISO-8601 UTC timestamp."""
    return datetime.now(UTC).isoformat()


def current_date() -> str:
    """Today's UTC date as YYYY-MM-DD."""
    return datetime.now(UTC).date().isoformat()


def calculate_correct_rate(correct_count: int, practice_count: int) -> float:
    """Percentage of correct answers, 0 when nothing was practiced."""
    if practice_count <= 0:
        return 0.0
    return correct_count / practice_count * 100


def calculate_total_chapters(total_words: int) -> int:
    """Number of fixed-size chapters needed for a word list."""
    if total_words <= 0:
        return 0
    return math.ceil(total_words / WORDS_PER_CHAPTER)


@dataclass
class WordRecord:
    """Practice counters of one word inside a chapter shard."""
    word: str
    practice_count: int = 0
    correct_count: int = 0
    error_count: int = 0
    last_practice_time: str = field(default_factory=current_timestamp)
    correct_rate: float = 0.0

    def record_attempt(self, is_correct: bool) -> None:
        """Count one answer and refresh the derived fields."""
        self.practice_count += 1
        if is_correct:
            self.correct_count += 1
        else:
            self.error_count += 1
        self.last_practice_time = current_timestamp()
        self.correct_rate = calculate_correct_rate(self.correct_count, self.practice_count)

    def to_data(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "practiceCount": self.practice_count,
            "correctCount": self.correct_count,
            "errorCount": self.error_count,
            "lastPracticeTime": self.last_practice_time,
            "correctRate": self.correct_rate,
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "WordRecord":
        return cls(
            word=data["word"],
            practice_count=int(data.get("practiceCount", 0)),
            correct_count=int(data.get("correctCount", 0)),
            error_count=int(data.get("errorCount", 0)),
            last_practice_time=data.get("lastPracticeTime", ""),
            correct_rate=float(data.get("correctRate", 0.0)),
        )


@dataclass
class ChapterRecord:
    """One shard: every word record of a (dictionary, mode, chapter)."""
    chapter_number: int
    total_words_in_chapter: int = WORDS_PER_CHAPTER
    completed_words_count: int = 0
    chapter_completion_count: int = 0
    last_practice_time: str = field(default_factory=current_timestamp)
    word_records: Dict[str, WordRecord] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.word_records

    def recalculate(self) -> None:
        """Recompute the chapter aggregates from all word records.

        Words that were never practiced do not take part in the minimum,
        and a chapter without practiced words has completion 0.
        """
        practiced = [wr for wr in self.word_records.values() if wr.practice_count > 0]
        self.total_words_in_chapter = WORDS_PER_CHAPTER
        self.completed_words_count = len(practiced)
        self.chapter_completion_count = min((wr.correct_count for wr in practiced), default=0)

    @property
    def practice_count(self) -> int:
        return sum(wr.practice_count for wr in self.word_records.values())

    @property
    def correct_count(self) -> int:
        return sum(wr.correct_count for wr in self.word_records.values())

    @property
    def error_count(self) -> int:
        return sum(wr.error_count for wr in self.word_records.values())

    @property
    def correct_rate(self) -> float:
        return calculate_correct_rate(self.correct_count, self.practice_count)

    def to_data(self) -> Dict[str, Any]:
        return {
            "chapterNumber": self.chapter_number,
            "totalWordsInChapter": self.total_words_in_chapter,
            "completedWordsCount": self.completed_words_count,
            "chapterCompletionCount": self.chapter_completion_count,
            "lastPracticeTime": self.last_practice_time,
            "wordRecords": {word: wr.to_data() for word, wr in self.word_records.items()},
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "ChapterRecord":
        return cls(
            chapter_number=int(data["chapterNumber"]),
            total_words_in_chapter=int(data.get("totalWordsInChapter", WORDS_PER_CHAPTER)),
            completed_words_count=int(data.get("completedWordsCount", 0)),
            chapter_completion_count=int(data.get("chapterCompletionCount", 0)),
            last_practice_time=data.get("lastPracticeTime", ""),
            word_records={
                word: WordRecord.from_data(wr) for word, wr in (data.get("wordRecords") or {}).items()
            },
        )


@dataclass
class DictMainRecord:
    """Coarse progress of a dictionary in one practice mode."""
    dict_id: str
    dict_name: str
    total_words: int
    total_chapters: int
    current_chapter: int
    current_word_index: int
    practice_mode: PracticeMode
    chapter_loop: bool
    last_practice_time: str
    created_time: str

    @classmethod
    def create_default(
        cls,
        dict_id: str,
        dict_name: str,
        total_words: int,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> "DictMainRecord":
        """Build a fresh record positioned on the first word."""
        now = current_timestamp()
        return cls(
            dict_id=dict_id,
            dict_name=dict_name,
            total_words=total_words,
            total_chapters=calculate_total_chapters(total_words),
            current_chapter=1,
            current_word_index=0,
            practice_mode=practice_mode,
            chapter_loop=True,
            last_practice_time=now,
            created_time=now,
        )

    def sync_total_words(self, total_words: int) -> bool:
        """Correct the word count if the list changed. Returns True when modified."""
        if self.total_words == total_words:
            return False
        self.total_words = total_words
        self.total_chapters = calculate_total_chapters(total_words)
        return True

    def to_data(self) -> Dict[str, Any]:
        return {
            "dictId": self.dict_id,
            "dictName": self.dict_name,
            "totalWords": self.total_words,
            "totalChapters": self.total_chapters,
            "currentChapter": self.current_chapter,
            "currentWordIndex": self.current_word_index,
            "practiceMode": self.practice_mode.value,
            "chapterLoop": self.chapter_loop,
            "lastPracticeTime": self.last_practice_time,
            "createdTime": self.created_time,
        }

    @classmethod
    def from_data(
        cls, data: Dict[str, Any], practice_mode: Optional[PracticeMode] = None
    ) -> "DictMainRecord":
        """Decode a stored main record.

        ``practice_mode`` is the mode of the key the document was read from and
        takes precedence over the stored ``practiceMode``.
        """
        if practice_mode is None:
            practice_mode = PracticeMode(data.get("practiceMode", PracticeMode.NORMAL.value))
        total_words = int(data.get("totalWords", 0))
        return cls(
            dict_id=data["dictId"],
            dict_name=data.get("dictName", ""),
            total_words=total_words,
            total_chapters=int(data.get("totalChapters", calculate_total_chapters(total_words))),
            current_chapter=int(data.get("currentChapter", 1)),
            current_word_index=int(data.get("currentWordIndex", 0)),
            practice_mode=practice_mode,
            chapter_loop=bool(data.get("chapterLoop", True)),
            last_practice_time=data.get("lastPracticeTime", ""),
            created_time=data.get("createdTime", ""),
        )


@dataclass
class DayWordEvent:
    """A single practice attempt as logged in the daily activity record."""
    word: str
    translation: str
    phonetics: str
    dict_id: str
    dict_name: str
    chapter_number: int
    practice_time: str
    is_correct: bool

    def to_data(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "translation": self.translation,
            "phonetics": self.phonetics,
            "dictId": self.dict_id,
            "dictName": self.dict_name,
            "chapterNumber": self.chapter_number,
            "practiceTime": self.practice_time,
            "isCorrect": self.is_correct,
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "DayWordEvent":
        return cls(
            word=data["word"],
            translation=data.get("translation", ""),
            phonetics=data.get("phonetics", ""),
            dict_id=data["dictId"],
            dict_name=data.get("dictName", ""),
            chapter_number=int(data["chapterNumber"]),
            practice_time=data.get("practiceTime", ""),
            is_correct=bool(data.get("isCorrect", False)),
        )


@dataclass
class DayDictWords:
    """Distinct words practiced in one dictionary on one day, per chapter."""
    dict_id: str
    dict_name: str
    chapters: Dict[int, List[str]] = field(default_factory=dict)

    @property
    def word_count(self) -> int:
        return sum(len(words) for words in self.chapters.values())


@dataclass
class DayActivityRecord:
    """Every practice attempt of one calendar day in one mode."""
    date: str
    words: List[DayWordEvent] = field(default_factory=list)

    def practiced_words(self) -> Dict[str, DayDictWords]:
        """Deduplicated view: dictionary -> chapter -> distinct words, in first-seen order."""
        projection: Dict[str, DayDictWords] = {}
        for event in self.words:
            dict_words = projection.get(event.dict_id)
            if dict_words is None:
                dict_words = DayDictWords(dict_id=event.dict_id, dict_name=event.dict_name)
                projection[event.dict_id] = dict_words
            chapter_words = dict_words.chapters.setdefault(event.chapter_number, [])
            if event.word not in chapter_words:
                chapter_words.append(event.word)
        return projection

    def events_by_word(self) -> Dict[Tuple[str, int, str], List[DayWordEvent]]:
        """Attempts grouped by (dictId, chapter, word), each group in log order."""
        groups: Dict[Tuple[str, int, str], List[DayWordEvent]] = {}
        for event in self.words:
            groups.setdefault((event.dict_id, event.chapter_number, event.word), []).append(event)
        return groups

    def to_data(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "words": [event.to_data() for event in self.words],
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "DayActivityRecord":
        return cls(
            date=data["date"],
            words=[DayWordEvent.from_data(event) for event in data.get("words") or []],
        )


@dataclass
class DayIndexEntry:
    """A day with activity and whether its analysis report exists."""
    date: str
    analysis_generated: bool = False

    def to_data(self) -> Dict[str, Any]:
        return {"date": self.date, "analysisGenerated": self.analysis_generated}

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "DayIndexEntry":
        return cls(date=data["date"], analysis_generated=bool(data.get("analysisGenerated", False)))
