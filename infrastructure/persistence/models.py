from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from infrastructure.persistence.database import Base


class GenerationRunModel(Base):
    """ORM model for one generation run"""
    __tablename__ = 'generation_runs'

    id = Column(String, primary_key=True)
    name = Column(String)
    seed = Column(Integer)
    config = Column(Text)
    sbom = Column(Text)
    stats = Column(Text)
    total_artifacts = Column(Integer)
    total_modules = Column(Integer)
    total_lines = Column(Integer)
    has_cycles = Column(Boolean)
    generated_at = Column(DateTime)
    created_at = Column(DateTime)

    issues = relationship("IssueModel", back_populates="run", cascade="all, delete-orphan")


class IssueModel(Base):
    """ORM model for injected dependency issues"""
    __tablename__ = 'dependency_issues'

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String, ForeignKey('generation_runs.id'))
    type = Column(String)
    artifacts = Column(Text)
    description = Column(Text)
    missing = Column(String, nullable=True)

    run = relationship("GenerationRunModel", back_populates="issues")
