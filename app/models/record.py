from sqlalchemy import Integer, String, LargeBinary, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class KVRecord(Base):
    """One value in a named bucket; keys sort lexically within a bucket."""

    __tablename__ = "kv_records"
    __table_args__ = (UniqueConstraint("bucket", "key", name="uq_kv_bucket_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    bucket: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    key: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
