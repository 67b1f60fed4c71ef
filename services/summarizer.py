# services/summarizer.py
import logging

from models import Summary
from services.generation import GenerationOrchestrator
from services.store import Store

logger = logging.getLogger(__name__)


def generate(store: Store, orchestrator: GenerationOrchestrator, user_id: int, document_id: int,
             summary_type: str, language: str = "id") -> Summary:
    doc = store.get_document(document_id, user_id)
    result = orchestrator.generate_summary(doc, summary_type, language)
    summary = store.create_summary(
        document_id=doc.id,
        user_id=user_id,
        content=result.content,
        summary_type=summary_type,
        language=language,
        word_count=result.word_count,
        status='completed',
        processing_time_seconds=result.processing_time_seconds,
        views_count=0,
    )
    logger.info("Generated %s summary %s for document %s (%d words)",
                summary_type, summary.id, doc.id, result.word_count)
    return summary


def view(store: Store, summary_id: int, user_id: int) -> Summary:
    """Fetch a summary and count the read."""
    return store.record_summary_view(store.get_summary(summary_id, user_id))


def to_dict(sm: Summary) -> dict:
    return {
        "id": sm.id,
        "document_id": sm.document_id,
        "document_name": sm.document.original_filename if sm.document else None,
        "user_id": sm.user_id,
        "content": sm.content,
        "summary_type": sm.summary_type,
        "language": sm.language,
        "word_count": sm.word_count,
        "status": sm.status,
        "processing_time_seconds": sm.processing_time_seconds,
        "views_count": sm.views_count,
        "last_viewed_at": sm.last_viewed_at.isoformat() if sm.last_viewed_at else None,
        "created_at": sm.created_at.isoformat() if sm.created_at else None,
    }
