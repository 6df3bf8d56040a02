"""Services — ScanningService, ReportService."""

from reqlint.services.scanning_service import CorpusScan, ScanningService
from reqlint.services.report_service import ReportService

__all__ = ["CorpusScan", "ScanningService", "ReportService"]
