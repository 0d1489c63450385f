"""Models for the derived analytics: daily reports and dictionary overviews."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from vocabtrack.models.record_models import calculate_correct_rate


@dataclass
class WordAnalysis:
    """A word practiced on the report day.

    ``attempts_today``/``correct_today`` come from the day's events; the
    remaining counters are the cumulative shard values at generation time.
    """
    word: str
    translation: str = ""
    phonetics: str = ""
    attempts_today: int = 0
    correct_today: int = 0
    practice_count: int = 0
    correct_count: int = 0
    error_count: int = 0
    correct_rate: float = 0.0
    last_practice_time: Optional[str] = None

    def to_data(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "translation": self.translation,
            "phonetics": self.phonetics,
            "attemptsToday": self.attempts_today,
            "correctToday": self.correct_today,
            "practiceCount": self.practice_count,
            "correctCount": self.correct_count,
            "errorCount": self.error_count,
            "correctRate": self.correct_rate,
            "lastPracticeTime": self.last_practice_time,
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "WordAnalysis":
        return cls(
            word=data["word"],
            translation=data.get("translation", ""),
            phonetics=data.get("phonetics", ""),
            attempts_today=int(data.get("attemptsToday", 0)),
            correct_today=int(data.get("correctToday", 0)),
            practice_count=int(data.get("practiceCount", 0)),
            correct_count=int(data.get("correctCount", 0)),
            error_count=int(data.get("errorCount", 0)),
            correct_rate=float(data.get("correctRate", 0.0)),
            last_practice_time=data.get("lastPracticeTime"),
        )


@dataclass
class ChapterAnalysis:
    """Chapter block of a daily report."""
    chapter_number: int
    chapter_completion_count: int = 0
    words: List[WordAnalysis] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def attempts_today(self) -> int:
        return sum(w.attempts_today for w in self.words)

    @property
    def correct_today(self) -> int:
        return sum(w.correct_today for w in self.words)

    @property
    def practice_count(self) -> int:
        return sum(w.practice_count for w in self.words)

    @property
    def correct_count(self) -> int:
        return sum(w.correct_count for w in self.words)

    @property
    def error_count(self) -> int:
        return sum(w.error_count for w in self.words)

    @property
    def correct_rate(self) -> float:
        return calculate_correct_rate(self.correct_count, self.practice_count)

    def to_data(self) -> Dict[str, Any]:
        return {
            "chapterNumber": self.chapter_number,
            "wordCount": self.word_count,
            "attemptsToday": self.attempts_today,
            "correctToday": self.correct_today,
            "practiceCount": self.practice_count,
            "correctCount": self.correct_count,
            "errorCount": self.error_count,
            "correctRate": self.correct_rate,
            "chapterCompletionCount": self.chapter_completion_count,
            "words": [w.to_data() for w in self.words],
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "ChapterAnalysis":
        # Totals are derived from the words, so only the stored inputs are read back
        return cls(
            chapter_number=int(data["chapterNumber"]),
            chapter_completion_count=int(data.get("chapterCompletionCount", 0)),
            words=[WordAnalysis.from_data(w) for w in data.get("words") or []],
        )


@dataclass
class DictAnalysis:
    dict_id: str
    dict_name: str
    chapters: Dict[int, ChapterAnalysis] = field(default_factory=dict)

    def to_data(self) -> Dict[str, Any]:
        return {
            "dictId": self.dict_id,
            "dictName": self.dict_name,
            "chapters": {str(number): chapter.to_data() for number, chapter in self.chapters.items()},
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "DictAnalysis":
        return cls(
            dict_id=data["dictId"],
            dict_name=data.get("dictName", ""),
            chapters={
                int(number): ChapterAnalysis.from_data(chapter)
                for number, chapter in (data.get("chapters") or {}).items()
            },
        )


@dataclass
class ModeAnalysis:
    """All dictionaries practiced in one mode on the report day."""
    dicts: Dict[str, DictAnalysis] = field(default_factory=dict)

    def to_data(self) -> Dict[str, Any]:
        return {"dicts": {dict_id: d.to_data() for dict_id, d in self.dicts.items()}}

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "ModeAnalysis":
        return cls(dicts={dict_id: DictAnalysis.from_data(d) for dict_id, d in (data.get("dicts") or {}).items()})


@dataclass
class ModeTotals:
    chapters: int = 0
    words: int = 0

    def to_data(self) -> Dict[str, Any]:
        return {"chapters": self.chapters, "words": self.words}

    @classmethod
    def from_data(cls, data: Optional[Dict[str, Any]]) -> "ModeTotals":
        data = data or {}
        return cls(chapters=int(data.get("chapters", 0)), words=int(data.get("words", 0)))


@dataclass
class DictSummary:
    dict_id: str
    dict_name: str
    total_words_in_dict: int = 0
    normal_mode: ModeTotals = field(default_factory=ModeTotals)
    dictation_mode: ModeTotals = field(default_factory=ModeTotals)

    def to_data(self) -> Dict[str, Any]:
        return {
            "dictId": self.dict_id,
            "dictName": self.dict_name,
            "totalWordsInDict": self.total_words_in_dict,
            "normalMode": self.normal_mode.to_data(),
            "dictationMode": self.dictation_mode.to_data(),
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "DictSummary":
        return cls(
            dict_id=data["dictId"],
            dict_name=data.get("dictName", ""),
            total_words_in_dict=int(data.get("totalWordsInDict", 0)),
            normal_mode=ModeTotals.from_data(data.get("normalMode")),
            dictation_mode=ModeTotals.from_data(data.get("dictationMode")),
        )


@dataclass
class AnalysisSummary:
    dicts: List[DictSummary] = field(default_factory=list)

    @property
    def total_dicts(self) -> int:
        return len(self.dicts)

    @property
    def total_chapters(self) -> int:
        return sum(d.normal_mode.chapters + d.dictation_mode.chapters for d in self.dicts)

    @property
    def total_words(self) -> int:
        return sum(d.normal_mode.words + d.dictation_mode.words for d in self.dicts)

    def to_data(self) -> Dict[str, Any]:
        return {
            "totalDicts": self.total_dicts,
            "totalChapters": self.total_chapters,
            "totalWords": self.total_words,
            "dicts": [d.to_data() for d in self.dicts],
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "AnalysisSummary":
        return cls(dicts=[DictSummary.from_data(d) for d in data.get("dicts") or []])


@dataclass
class AnalysisReport:
    """Per-day aggregate over both practice modes."""
    date: str
    generated_at: str
    normal_mode: Optional[ModeAnalysis] = None
    dictation_mode: Optional[ModeAnalysis] = None
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)

    def to_data(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "generatedAt": self.generated_at,
            "normalMode": self.normal_mode.to_data() if self.normal_mode else None,
            "dictationMode": self.dictation_mode.to_data() if self.dictation_mode else None,
            "summary": self.summary.to_data(),
        }

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "AnalysisReport":
        normal = data.get("normalMode")
        dictation = data.get("dictationMode")
        return cls(
            date=data["date"],
            generated_at=data.get("generatedAt", ""),
            normal_mode=ModeAnalysis.from_data(normal) if normal is not None else None,
            dictation_mode=ModeAnalysis.from_data(dictation) if dictation is not None else None,
            summary=AnalysisSummary.from_data(data.get("summary") or {}),
        )


@dataclass
class ChapterStats:
    """Display row of one chapter in a dictionary overview."""
    chapter: int
    total_words: int
    practice_count: int = 0
    error_count: int = 0
    correct_rate: float = 0.0
    completion_count: int = 0


@dataclass
class DictOverview:
    """Cumulative statistics of a dictionary in one mode, built from its shards."""
    dict_id: str
    dict_name: str
    total_words: int
    total_chapters: int
    practice_mode: str
    chapter_loop: bool
    total_practice_count: int = 0
    total_correct_count: int = 0
    total_error_count: int = 0
    total_completed_words: int = 0
    chapters: List[ChapterStats] = field(default_factory=list)

    @property
    def overall_correct_rate(self) -> float:
        return calculate_correct_rate(self.total_correct_count, self.total_practice_count)
