from fastapi import APIRouter
from hr_attendance.routers import attendance, employees, reports, settings

# Routers are aggregated here; main.py only imports this hub.
api_router = APIRouter()

api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(attendance.router, tags=["Attendance"])
api_router.include_router(settings.router, tags=["Settings"])
api_router.include_router(reports.router, tags=["Reports"])
