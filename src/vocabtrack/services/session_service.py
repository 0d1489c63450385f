"""Service for moving a learner through a word list chapter by chapter."""
import logging
from dataclasses import dataclass, replace

from vocabtrack.config import WORDS_PER_CHAPTER
from vocabtrack.models.record_models import DictMainRecord, PracticeMode
from vocabtrack.services.record_service import RecordService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PracticeSession:
    """Position of an open practice session.

    This is a cached view of the main record. Every operation takes a
    session and returns the updated one; the main record stays the
    durable copy and a new session is opened on dictionary or mode switch.
    """
    dict_id: str
    dict_name: str
    total_words: int
    total_chapters: int
    practice_mode: PracticeMode
    current_chapter: int = 1
    current_word_index: int = 0
    chapter_loop: bool = True

    @classmethod
    def from_record(cls, record: DictMainRecord) -> "PracticeSession":
        return cls(
            dict_id=record.dict_id,
            dict_name=record.dict_name,
            total_words=record.total_words,
            total_chapters=record.total_chapters,
            practice_mode=record.practice_mode,
            current_chapter=record.current_chapter,
            current_word_index=record.current_word_index,
            chapter_loop=record.chapter_loop,
        )


def chapter_size(session: PracticeSession, chapter_number: int) -> int:
    """Number of words in a chapter; the last one may be short."""
    if chapter_number < 1 or chapter_number > session.total_chapters:
        return 0
    remaining = session.total_words - (chapter_number - 1) * WORDS_PER_CHAPTER
    return max(0, min(WORDS_PER_CHAPTER, remaining))


class SessionService:
    """Service for practice navigation on top of the record service."""

    def __init__(self, record_service: RecordService):
        """Initialize the service with a record service."""
        self.record_service = record_service

    async def open_session(
        self,
        dict_id: str,
        dict_name: str,
        total_words: int,
        practice_mode: PracticeMode = PracticeMode.NORMAL,
    ) -> PracticeSession:
        """Restore the stored position of a dictionary in a mode."""
        record = await self.record_service.load_main_record(dict_id, dict_name, total_words, practice_mode)
        session = PracticeSession.from_record(record)

        # The list may have shrunk since the position was saved
        if session.total_chapters and session.current_chapter > session.total_chapters:
            logger.info(f"Stored chapter {session.current_chapter} of {dict_id} no longer exists, restarting chapter 1")
            session = replace(session, current_chapter=1, current_word_index=0)
        size = chapter_size(session, session.current_chapter)
        if size and session.current_word_index >= size:
            session = replace(session, current_word_index=size - 1)

        logger.info(
            f"Opened {dict_id} ({practice_mode.value}) at chapter {session.current_chapter}, "
            f"word {session.current_word_index + 1}"
        )
        return session

    async def record_answer(
        self,
        session: PracticeSession,
        word: str,
        is_correct: bool,
        translation: str = "",
        phonetics: str = "",
    ) -> None:
        """Report an answer for a word of the current chapter."""
        await self.record_service.record_word_practice(
            session.dict_id,
            session.current_chapter,
            word,
            is_correct,
            session.practice_mode,
            dict_name=session.dict_name,
            translation=translation,
            phonetics=phonetics,
        )

    async def switch_chapter(self, session: PracticeSession, chapter_number: int) -> PracticeSession:
        """Jump to the first word of a chapter. Unknown chapters are ignored."""
        if chapter_number < 1 or chapter_number > session.total_chapters:
            logger.warning(f"Chapter {chapter_number} is out of range 1..{session.total_chapters}")
            return session
        session = replace(session, current_chapter=chapter_number, current_word_index=0)
        await self.record_service.update_current_position(
            session.dict_id, chapter_number, 0, session.practice_mode
        )
        return session

    async def next_word(self, session: PracticeSession) -> PracticeSession:
        """Advance one word.

        At the end of a chapter the completion count is refreshed, then the
        chapter restarts when looping, otherwise the next chapter starts.
        The last chapter without looping keeps its position.
        """
        next_index = session.current_word_index + 1
        if next_index < chapter_size(session, session.current_chapter):
            session = replace(session, current_word_index=next_index)
            await self.record_service.update_current_position(
                session.dict_id, session.current_chapter, next_index, session.practice_mode
            )
            return session

        await self.record_service.record_chapter_completion(
            session.dict_id, session.current_chapter, session.practice_mode
        )

        if session.chapter_loop:
            logger.info(f"Chapter {session.current_chapter} of {session.dict_id} restarts")
            session = replace(session, current_word_index=0)
            await self.record_service.update_current_position(
                session.dict_id, session.current_chapter, 0, session.practice_mode
            )
            return session

        if session.current_chapter < session.total_chapters:
            logger.info(f"Chapter {session.current_chapter} of {session.dict_id} completed")
            return await self.switch_chapter(session, session.current_chapter + 1)

        logger.info(f"All chapters of {session.dict_id} completed")
        return session

    async def set_chapter_loop(self, session: PracticeSession, chapter_loop: bool) -> PracticeSession:
        await self.record_service.update_chapter_loop(session.dict_id, chapter_loop, session.practice_mode)
        return replace(session, chapter_loop=chapter_loop)

    async def switch_mode(self, session: PracticeSession, practice_mode: PracticeMode) -> PracticeSession:
        """Open the same dictionary in another mode; the cached position is dropped."""
        return await self.open_session(session.dict_id, session.dict_name, session.total_words, practice_mode)
