from sqlalchemy import JSON, Column, Integer, String, UniqueConstraint
from .db import Base


class DocumentORM(Base):
    __tablename__ = "documents"
    id = Column(Integer, primary_key=True)            # insertion order
    collection = Column(String(64), nullable=False, index=True)
    doc_id = Column(String(24), nullable=False, unique=True)
    unique_key = Column(String(512), nullable=True)   # optional per-collection dedup key
    body = Column(JSON, nullable=False, default=dict)
    # bumped on every ORM update; a stale writer matches zero rows
    version = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("collection", "unique_key", name="uq_documents_collection_key"),
    )
    __mapper_args__ = {"version_id_col": version}
