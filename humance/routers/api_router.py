from fastapi import APIRouter
from humance.routers import (
    admin, auth, bonus, departments, kpi, notifications,
    observations, reports, reviews, templates, trainings, users
)

# Routers are aggregated here; main.py only imports this hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(departments.router, tags=["Departments"])
api_router.include_router(templates.router, tags=["Review Templates"])
api_router.include_router(reviews.router, tags=["Performance Reviews"])
api_router.include_router(observations.router, tags=["Observation Diary"])
api_router.include_router(kpi.router, tags=["KPI"])
api_router.include_router(bonus.router, tags=["Bonus Parameters"])
api_router.include_router(reports.router, tags=["Reports"])
api_router.include_router(trainings.router, tags=["Trainings"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(admin.router, tags=["Administration"])
