from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.normalizer import AttendanceNormalizer
from .biotime.client import BioTimeClient
from .biotime.config import BioTimeConfig
from .biotime.gap_filler import GapFiller
from .biotime.poller import BiometricPoller
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .overbilling.auto_punchout import AutoPunchoutService
from .overbilling.calculator.standard_calculator import StandardCapCalculator
from .overbilling.service import AntiOverbillingProcessor
from .pipeline.config import PipelineConfig
from .pipeline.service import ReconciliationPipeline
from .reports.service import AttendanceReportService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.resolver import ShiftResolver
from .staging.mysql_staging_repository import MySQLStagingRepository
from .staging.service import StagingMaintenanceService
from .timing.factory import TimingStrategyFactory
from .timing.service import TimingClassifier


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    pipeline_config: PipelineConfig

    employees_repo: MySQLEmployeeRepository
    shifts_repo: MySQLShiftRepository
    schedules_repo: MySQLScheduleRepository
    staging_repo: MySQLStagingRepository
    attendance_repo: MySQLAttendanceRepository

    biotime_client: BioTimeClient
    poller: BiometricPoller
    gap_filler: GapFiller
    staging_maintenance: StagingMaintenanceService
    normalizer: AttendanceNormalizer
    timing_classifier: TimingClassifier
    overbilling_processor: AntiOverbillingProcessor
    auto_punchout_service: AutoPunchoutService
    report_service: AttendanceReportService
    employee_service: EmployeeService
    schedule_service: ScheduleService
    pipeline: ReconciliationPipeline


def build_container(
    *,
    db_config: dict,
    biotime_config: Optional[dict] = None,
    pipeline_config: Optional[dict] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    settings = PipelineConfig.from_dict(pipeline_config)

    employees_repo = MySQLEmployeeRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    staging_repo = MySQLStagingRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    resolver = ShiftResolver(
        shifts_repo,
        employees_repo,
        schedules_repo,
        default_grace_minutes=settings.grace_minutes,
    )

    biotime_client = BioTimeClient(BioTimeConfig.from_dict(biotime_config or {}))
    poller = BiometricPoller(
        biotime_client,
        staging_repo,
        overlap_minutes=settings.poll_overlap_minutes,
        initial_lookback_hours=settings.initial_lookback_hours,
    )
    gap_filler = GapFiller(
        poller,
        staging_repo,
        sparse_threshold=settings.sparse_day_threshold,
        scan_days=settings.gap_scan_days,
    )
    normalizer = AttendanceNormalizer(
        staging_repo,
        attendance_repo,
        employees_repo,
        resolver,
        batch_size=settings.normalizer_batch_size,
        max_session_hours=settings.max_session_hours,
        max_overtime_hours=settings.max_overtime_hours,
        duplicate_tap_minutes=settings.duplicate_tap_minutes,
    )
    timing_classifier = TimingClassifier(
        attendance_repo,
        resolver,
        strategy_factory=TimingStrategyFactory(departure_on_time_minutes=settings.departure_on_time_minutes),
        batch_size=settings.classifier_batch_size,
        lookback_days=settings.classifier_lookback_days,
    )
    overbilling_processor = AntiOverbillingProcessor(
        attendance_repo,
        resolver,
        calculator=StandardCapCalculator(
            standard_hours=settings.standard_day_hours,
            max_overtime_hours=settings.max_overtime_hours,
            max_working_hours=settings.max_working_hours,
        ),
    )
    auto_punchout_service = AutoPunchoutService(
        attendance_repo,
        resolver,
        threshold_hours=settings.auto_punchout_threshold_hours,
        max_session_hours=settings.max_session_hours,
        penalty_hours=settings.missed_punch_penalty_hours,
    )
    pipeline = ReconciliationPipeline(poller, normalizer, timing_classifier, overbilling_processor)

    return Container(
        conn=conn,
        pipeline_config=settings,
        employees_repo=employees_repo,
        shifts_repo=shifts_repo,
        schedules_repo=schedules_repo,
        staging_repo=staging_repo,
        attendance_repo=attendance_repo,
        biotime_client=biotime_client,
        poller=poller,
        gap_filler=gap_filler,
        staging_maintenance=StagingMaintenanceService(staging_repo),
        normalizer=normalizer,
        timing_classifier=timing_classifier,
        overbilling_processor=overbilling_processor,
        auto_punchout_service=auto_punchout_service,
        report_service=AttendanceReportService(attendance_repo, employees_repo),
        employee_service=EmployeeService(employees_repo),
        schedule_service=ScheduleService(schedules_repo, shifts_repo, employees_repo),
        pipeline=pipeline,
    )
