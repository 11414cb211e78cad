from __future__ import annotations

from typing import Any

from inspection.domain.metrics import compute_officer_stats, period_summary
from inspection.infra.repositories import Repository
from inspection.services.auth_service import TAB_DASHBOARD, SessionContext


class MetricsService:
    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def dashboard(self, ctx: SessionContext, year: int, month: int) -> dict[str, Any]:
        if TAB_DASHBOARD not in ctx.available_tabs():
            raise PermissionError("Inspection analytics are not available for this level")
        if not 1 <= month <= 12:
            raise ValueError("month must be between 1 and 12")

        reports = self.repo.list_reports()
        stats = compute_officer_stats(
            year,
            month,
            self.repo.list_officers(),
            reports,
            total_sites=len(self.repo.list_sites()),
        )
        summary = period_summary(reports, year, month)
        return {
            "year": year,
            "month": month,
            "summary": {
                "inspections": summary.inspections,
                "active_sites": summary.active_sites,
                "pending": summary.pending,
            },
            "officers": [
                {
                    "name": s.name,
                    "designation": s.designation,
                    "level": s.level,
                    "visits": s.visit_count,
                    "target": s.target,
                    "target_label": s.target_label,
                    "percentage": round(s.percentage, 2),
                    "color": s.color.value,
                    "color_hex": s.color.hex,
                }
                for s in stats
            ],
        }
