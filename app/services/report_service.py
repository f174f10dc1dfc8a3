"""Report service: persistence of analyses and their monthly snapshots

Adding statements to a report is a read-merge-write of the report's
analysis. It runs under ``report_locks`` for the report id and re-reads the
row ``FOR UPDATE`` so two concurrent uploads cannot drop each other's months.
Extraction happens before anything is written; any failure rolls back and
leaves the stored analysis as it was.
"""

import asyncio
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Sequence
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.exceptions import AuthorizationError, DatabaseError, NotFoundError, ValidationError
from app.models.report import MonthlySnapshot, Report
from app.schemas.analysis import AnalysisResult, MonthlySnapshot as MonthlySnapshotSchema
from app.schemas.report import ReportResponse
from app.services.ai_service import extraction_service
from app.services.base import BaseService
from app.services.merge_service import merge_service
from app.services.statement_service import statement_service


class ReportLockRegistry:
    """Process-local mutual exclusion per report id.

    Entries are dropped once nobody holds or waits for them.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, report_id: str) -> AsyncIterator[None]:
        with self._guard:
            lock = self._locks.setdefault(report_id, asyncio.Lock())
            self._holders[report_id] = self._holders.get(report_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            with self._guard:
                self._holders[report_id] -= 1
                if self._holders[report_id] == 0:
                    del self._holders[report_id]
                    del self._locks[report_id]

    def is_held(self, report_id: str) -> bool:
        with self._guard:
            lock = self._locks.get(report_id)
            return lock is not None and lock.locked()


report_locks = ReportLockRegistry()


class ReportService(BaseService[Report]):
    """Service for reports and their snapshot history"""

    def __init__(self):
        super().__init__(Report)

    # Persistence layer

    def load_analysis(self, db: Session, report_id: str) -> Optional[AnalysisResult]:
        """Stored analysis of a report, or None when the report does not exist"""
        report = self.get(db, report_id)
        if report is None:
            return None
        return merge_service.coerce(report.analysis_data, "existing")

    def save_analysis(
        self,
        db: Session,
        report: Report,
        analysis: AnalysisResult,
        statement_ids: Sequence[str],
        commit: bool = True,
    ) -> Report:
        report.analysis_data = analysis.to_json_dict()
        report.statement_ids = list(statement_ids)
        db.add(report)
        if commit:
            self._commit(db, "save_analysis", report_id=report.id)
            db.refresh(report)
        return report

    def append_monthly_snapshots(
        self,
        db: Session,
        owner_id: str,
        report_id: str,
        snapshots: Sequence[MonthlySnapshotSchema],
        commit: bool = True,
    ) -> int:
        """Insert rows for months the caller already filtered as new"""
        for snapshot in snapshots:
            db.add(MonthlySnapshot(
                user_id=owner_id,
                report_id=report_id,
                month=snapshot.month,
                month_name=snapshot.month_name,
                beginning_balance=snapshot.beginning_balance,
                ending_balance=snapshot.ending_balance,
                total_deposits=snapshot.total_deposits,
                total_withdrawals=snapshot.total_withdrawals,
                negative_days=snapshot.negative_days,
                average_daily_balance=snapshot.average_daily_balance,
            ))
        if commit:
            self._commit(db, "append_monthly_snapshots", report_id=report_id)
        return len(snapshots)

    def persisted_months(self, db: Session, owner_id: str, report_id: str) -> set:
        rows = (
            db.query(MonthlySnapshot.month)
            .filter(MonthlySnapshot.user_id == owner_id, MonthlySnapshot.report_id == report_id)
            .all()
        )
        return {month for (month,) in rows}

    def project_monthly_snapshots(
        self,
        db: Session,
        owner_id: str,
        report_id: str,
        analysis: AnalysisResult,
        commit: bool = True,
    ) -> int:
        """Append one snapshot row per month not yet persisted for the report.

        Existing rows are never updated or deleted.
        """
        already_persisted = self.persisted_months(db, owner_id, report_id)
        new_snapshots = []
        for snapshot in analysis.monthly_data:
            if snapshot.month in already_persisted:
                continue
            already_persisted.add(snapshot.month)
            new_snapshots.append(snapshot)

        count = self.append_monthly_snapshots(db, owner_id, report_id, new_snapshots, commit=commit)
        self.log_operation("project_monthly_snapshots", report_id=report_id, appended=count)
        return count

    # Report operations

    def create_report(
        self,
        db: Session,
        owner_id: str,
        statement_ids: Sequence[str],
        analysis: AnalysisResult,
    ) -> Report:
        """Save an analysis as a new report and project its months"""
        report = Report(
            user_id=owner_id,
            statement_ids=list(dict.fromkeys(statement_ids)),
            analysis_data=analysis.to_json_dict(),
        )
        try:
            db.add(report)
            db.flush()
            self.project_monthly_snapshots(db, owner_id, report.id, analysis, commit=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            self.log_error(e, "create_report", user_id=owner_id)
            raise DatabaseError("Failed to create report")

        db.refresh(report)
        self.log_operation("create_report", report_id=report.id, user_id=owner_id)
        return report

    async def add_statements(
        self,
        db: Session,
        report_id: str,
        owner_id: str,
        statement_ids: Sequence[str],
    ) -> Report:
        """Analyze new statements and merge them into the report's analysis"""
        if report_locks.is_held(report_id):
            self.log_operation("waiting_for_report_lock", report_id=report_id)

        async with report_locks.hold(report_id):
            try:
                report = self._get_for_update(db, report_id)
                if report is None:
                    raise NotFoundError("Report not found", details={"id": report_id})
                if report.user_id != owner_id:
                    raise AuthorizationError("Not authorized to modify this report", details={"id": report_id})

                existing = merge_service.coerce(report.analysis_data, "existing")
                known_ids = list(report.statement_ids or [])

                already_included = set(known_ids)
                new_ids = [i for i in dict.fromkeys(statement_ids) if i not in already_included]
                if not new_ids:
                    raise ValidationError(
                        "Statements are already part of this report",
                        details={"statement_ids": list(statement_ids)},
                    )

                statements = statement_service.get_owned_statements(db, owner_id, new_ids)
                files = await statement_service.load_files(statements)
                newly_extracted = await extraction_service.extract(files)

                merged = merge_service.merge(existing, newly_extracted)
                all_ids = known_ids + [s.id for s in statements]

                self.save_analysis(db, report, merged, all_ids, commit=False)
                self.project_monthly_snapshots(db, owner_id, report.id, merged, commit=False)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                self.log_error(e, "add_statements", report_id=report_id)
                raise DatabaseError("Failed to add statements to report")
            except Exception:
                db.rollback()
                raise

        db.refresh(report)
        self.log_operation(
            "add_statements",
            report_id=report_id,
            user_id=owner_id,
            added=len(statements),
            months=merged.months,
        )
        return report

    def get_latest(self, db: Session, owner_id: str) -> Report:
        report = (
            db.query(Report)
            .filter(Report.user_id == owner_id)
            .order_by(Report.created_at.desc())
            .first()
        )
        if report is None:
            raise NotFoundError("No reports found")
        return report

    def monthly_history(self, db: Session, owner_id: str) -> List[MonthlySnapshot]:
        """Every snapshot row of the owner across reports, newest month first"""
        return (
            db.query(MonthlySnapshot)
            .filter(MonthlySnapshot.user_id == owner_id)
            .order_by(MonthlySnapshot.month.desc(), MonthlySnapshot.created_at.desc())
            .all()
        )

    def to_response(self, report: Report) -> ReportResponse:
        return ReportResponse(
            id=report.id,
            statement_ids=list(report.statement_ids or []),
            analysis=merge_service.coerce(report.analysis_data, "stored"),
            created_at=report.created_at,
            updated_at=report.updated_at,
        )

    def _get_for_update(self, db: Session, report_id: str) -> Optional[Report]:
        return (
            db.query(Report)
            .filter(Report.id == report_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def _commit(self, db: Session, operation: str, **kwargs) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            self.log_error(e, operation, **kwargs)
            raise DatabaseError("Failed to save report")


report_service = ReportService()
