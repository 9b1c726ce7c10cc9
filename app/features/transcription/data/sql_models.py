from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Integer, JSON, MetaData, String, Table
from app.core.database.base import metadata as default_metadata


def utc_now():
    return datetime.now(timezone.utc)


def transcript_table(collection: str, metadata: MetaData = default_metadata) -> Table:
    """
    The collection that holds transcript documents.

    One row per document. Rows are never updated: processing the same file
    again adds another document with a new id.
    """
    existing = metadata.tables.get(collection)
    if existing is not None:
        return existing

    return Table(
        collection,
        metadata,
        Column("id", String(32), primary_key=True),
        Column("filename", String, nullable=False, index=True),
        Column("recognition_status", String, nullable=False),
        Column("phrase_count", Integer, nullable=False, default=0),
        # Full document as written, including the phrase list.
        Column("document", JSON, nullable=False),
        Column("created_at", DateTime(timezone=True), default=utc_now),
    )
