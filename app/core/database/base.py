# File: app/core/database/base.py

from sqlalchemy import MetaData

# Shared registry for every collection (table) the document store holds.
# Tables are registered lazily by name, see app/features/transcription/data/sql_models.py
metadata = MetaData()
