"""API routes."""

from paylevel.api.routes.calendar import router as calendar_router
from paylevel.api.routes.export import router as export_router
from paylevel.api.routes.health import router as health_router
from paylevel.api.routes.jobs import router as jobs_router
from paylevel.api.routes.logs import router as logs_router
from paylevel.api.routes.payslip import router as payslip_router
from paylevel.api.routes.state import router as state_router
from paylevel.api.routes.stats import router as stats_router
from paylevel.api.routes.templates import router as templates_router

__all__ = [
    "calendar_router",
    "export_router",
    "health_router",
    "jobs_router",
    "logs_router",
    "payslip_router",
    "state_router",
    "stats_router",
    "templates_router",
]
