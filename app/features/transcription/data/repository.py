import logging
from typing import List, Optional

from sqlalchemy.engine import URL
from sqlalchemy.exc import OperationalError, ProgrammingError, SQLAlchemyError
from sqlalchemy.schema import CreateIndex, CreateTable
from sqlalchemy_utils import create_database, database_exists

from app.core.database.connection import document_store_url, scoped_engine
from app.core.errors import PersistenceError
from ..domain.interfaces import ITranscriptStore
from ..domain.models import TranscriptRecord
from .sql_models import transcript_table

logger = logging.getLogger(__name__)


class SqlTranscriptStore(ITranscriptStore):
    """
    Transcript persister on top of any SQLAlchemy database.

    Database and collection are created on demand before EVERY write; nothing
    remembers that they already exist, so a cold process or a freshly wiped
    store behaves the same as a warm one.
    """

    def __init__(self, url: URL, collection: str):
        self.url = url
        self.collection = collection
        self.table = transcript_table(collection)

    @classmethod
    def from_settings(cls, settings) -> "SqlTranscriptStore":
        url = document_store_url(
            settings.DOCUMENT_DB_ENDPOINT,
            settings.DOCUMENT_DB_KEY,
            settings.DOCUMENT_DB_DATABASE
        )
        return cls(url, settings.DOCUMENT_DB_COLLECTION)

    def persist(self, record: TranscriptRecord) -> str:
        if record.recognition_status is None:
            raise ValueError(f"Transcript {record.id} has no recognition status")

        try:
            # 1. Database
            self._ensure_database()

            with scoped_engine(self.url) as engine:
                # 2. Collection
                with engine.begin() as conn:
                    conn.execute(CreateTable(self.table, if_not_exists=True))
                    for index in self.table.indexes:
                        conn.execute(CreateIndex(index, if_not_exists=True))

                # 3. Document
                with engine.begin() as conn:
                    conn.execute(
                        self.table.insert().values(
                            id=record.id,
                            filename=record.filename,
                            recognition_status=record.recognition_status.value,
                            phrase_count=len(record.phrases),
                            document=record.to_document()
                        )
                    )
        except SQLAlchemyError as e:
            logger.error(f"Failed to persist transcript {record.id} for {record.filename}: {e}")
            raise PersistenceError(f"Could not store transcript {record.id}: {e}") from e

        logger.info(f"Transcript saved. ID: {record.id}, File: {record.filename}, Phrases: {len(record.phrases)}")
        return record.id

    def _ensure_database(self) -> None:
        """
        Creates the database if it is missing. Another invocation may create
        it between the check and the create; that counts as success.
        """
        if database_exists(self.url):
            return

        logger.info(f"Creating database {self.url.database}")
        try:
            create_database(self.url)
        except (ProgrammingError, OperationalError):
            if not database_exists(self.url):
                raise
            logger.debug(f"Database {self.url.database} was created concurrently")

    def get(self, record_id: str) -> Optional[dict]:
        """Reads a stored document back, or None if it does not exist."""
        with scoped_engine(self.url) as engine:
            with engine.connect() as conn:
                row = conn.execute(
                    self.table.select().where(self.table.c.id == record_id)
                ).first()
        return dict(row._mapping["document"]) if row else None

    def find_by_filename(self, filename: str) -> List[dict]:
        """All documents stored for `filename`, oldest first."""
        with scoped_engine(self.url) as engine:
            with engine.connect() as conn:
                rows = conn.execute(
                    self.table.select()
                    .where(self.table.c.filename == filename)
                    .order_by(self.table.c.created_at)
                ).all()
        return [dict(row._mapping["document"]) for row in rows]
