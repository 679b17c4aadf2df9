"""
Database models and operations for git execution audit records
Uses SQLite by default for repository state captures recorded against runs
"""

from datetime import datetime, timezone
from typing import Optional, Union
import logging
import os

from sqlalchemy import create_engine, Column, String, Integer, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import declarative_base, sessionmaker, Session, relationship
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def utcnow():
    """Helper to get timezone-aware UTC datetime for database defaults"""
    return datetime.now(timezone.utc)


Base = declarative_base()


class RunStep(Base):
    """Step recorded against a host run (system steps created by git capture)"""
    __tablename__ = "run_steps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String, nullable=False)  # Host-owned run identifier
    type = Column(String, nullable=False, default="Step::System")
    raw_response = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    repo_states = relationship("RepoState", back_populates="step", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_run_steps_run_id', 'run_id'),
    )


class RepoState(Base):
    """Uncommitted diff of a task workspace at the time of a run step"""
    __tablename__ = "repo_states"

    id = Column(Integer, primary_key=True, autoincrement=True)
    step_id = Column(Integer, ForeignKey("run_steps.id", ondelete="CASCADE"), nullable=False)
    uncommitted_diff = Column(Text, nullable=False)
    repository_path = Column(String, nullable=False)  # In-container git working directory
    created_at = Column(DateTime, default=utcnow)

    step = relationship("RunStep", back_populates="repo_states")


class DatabaseManager:
    """Database management and operations for audit records"""

    def __init__(self, database_url: Optional[str] = None):
        """
        Initialize database connection and create tables.

        Args:
            database_url: SQLAlchemy URL, defaults to AppConfig.DATABASE_URL
        """
        if database_url is None:
            from config.settings import AppConfig
            database_url = AppConfig.DATABASE_URL

        self.database_url = database_url

        if database_url.startswith('sqlite:///') and database_url != 'sqlite:///:memory:':
            data_dir = os.path.dirname(database_url[len('sqlite:///'):])
            if data_dir:
                os.makedirs(data_dir, exist_ok=True)

        connect_args = {}
        engine_kwargs = {}
        if database_url.startswith('sqlite'):
            connect_args = {
                "check_same_thread": False,
                "timeout": 20  # 20 second lock timeout
            }
            if database_url == 'sqlite:///:memory:':
                # One shared connection so every session sees the same in-memory database
                engine_kwargs['poolclass'] = StaticPool

        self.engine = create_engine(database_url, connect_args=connect_args, echo=False, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        Base.metadata.create_all(bind=self.engine)

    def get_session(self) -> Session:
        """Get a database session"""
        return self.SessionLocal()

    def record_repository_state(
        self,
        run_id: Union[int, str],
        uncommitted_diff: str,
        repository_path: str
    ) -> RepoState:
        """
        Persist a repository state capture as a system step on a run.

        Args:
            run_id: Host run identifier
            uncommitted_diff: Output of git diff HEAD
            repository_path: In-container git working directory

        Returns:
            The created RepoState (detached, attributes loaded)
        """
        with self.get_session() as session:
            try:
                step = RunStep(
                    run_id=str(run_id),
                    type="Step::System",
                    raw_response="Repository state captured",
                    content=f"Repository state captured\n\nUncommitted diff:\n{uncommitted_diff}",
                )
                repo_state = RepoState(
                    uncommitted_diff=uncommitted_diff,
                    repository_path=repository_path,
                )
                step.repo_states.append(repo_state)
                session.add(step)
                session.commit()
                session.refresh(repo_state)
                logger.info(f"Recorded repository state {repo_state.id} for run {run_id}")
                return repo_state
            except Exception as e:
                session.rollback()
                logger.error(f"Failed to record repository state for run {run_id}: {e}")
                raise
