"""Test evidence model."""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tracegate.database import Base, JSONType


class Evidence(Base):
    """Test execution evidence - append-only."""

    __tablename__ = "evidence"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    manifest_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("manifests.id"), nullable=False, index=True
    )
    execution_id: Mapped[str] = mapped_column(Text, nullable=False)
    commit_sha: Mapped[str | None] = mapped_column(String(64), nullable=True)
    environment: Mapped[str | None] = mapped_column(Text, nullable=True)
    executed_at: Mapped[str | None] = mapped_column(String(50), nullable=True)
    results_json: Mapped[list] = mapped_column(JSONType, nullable=False)
    created_at: Mapped[str] = mapped_column(String(50), nullable=False)
