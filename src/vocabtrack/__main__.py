"""Activation entry point: prepare today's records and backfill one missing analysis."""
import asyncio
import logging

from vocabtrack.config import ensure_directories, settings
from vocabtrack.logging_config import setup_logging
from vocabtrack.models.base import SessionLocal, init_db
from vocabtrack.models.record_models import PracticeMode
from vocabtrack.monitoring import start_monitoring
from vocabtrack.services.analysis_service import AnalysisService
from vocabtrack.services.day_record_service import DayRecordService
from vocabtrack.services.kv_store import KeyValueStore, SQLAlchemyKeyValueStore

logger = logging.getLogger(__name__)


async def activate(store: KeyValueStore) -> None:
    """Run the per-activation maintenance on a store."""
    day_record_service = DayRecordService(store)
    for practice_mode in PracticeMode:
        await day_record_service.ensure_today_record(practice_mode)

    analysis_service = AnalysisService(store, day_record_service=day_record_service)
    total_records = await day_record_service.get_total_records()
    processed = await analysis_service.check_and_generate_missing_analysis(total_records)
    if processed:
        logger.info(f"Analysis generated for {processed}")
    else:
        logger.info("No missing analysis to generate")


def main() -> None:
    """Main entry point."""
    ensure_directories()
    setup_logging("Starting vocabtrack activation ...")

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics exposed on port {settings.monitoring.port}")

    init_db()
    db = SessionLocal()
    try:
        asyncio.run(activate(SQLAlchemyKeyValueStore(db)))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        db.close()
        logger.info("Database session closed")


if __name__ == "__main__":
    main()
