from typing import List

from fastapi import APIRouter, Depends, status

from planitech.api.v1.dependencies import get_current_user, get_report_service, require_roles
from planitech.db.models.users import User
from planitech.features.reports.schemas import ReportCreateIn, ReportOut, ReportUpdateIn
from planitech.features.reports.services import ReportService
from planitech.security.access import Role

router = APIRouter(
    prefix="/intervention-reports",
    tags=["intervention-reports"],
    responses={404: {"description": "Not Found"}, 403: {"description": "Forbidden"}},
)

reviewers = require_roles(Role.ADMIN, Role.PROJECT_LEAD, Role.SUPPORT)
technicians = require_roles(Role.TECHNICIAN)

@router.get("", summary="Tous les rapports", response_model=List[ReportOut])
def list_reports(_: User = Depends(reviewers), svc: ReportService = Depends(get_report_service)):
    return svc.list_all()

@router.get("/my-reports", summary="Mes rapports (technicien)", response_model=List[ReportOut])
def my_reports(user: User = Depends(technicians), svc: ReportService = Depends(get_report_service)):
    return svc.list_mine(user)

@router.get(
    "/task/{task_id}",
    summary="Rapports d'une tâche",
    description="Un technicien ne voit que ses propres rapports.",
    response_model=List[ReportOut],
)
def task_reports(task_id: int, user: User = Depends(get_current_user), svc: ReportService = Depends(get_report_service)):
    return svc.list_for_task(user, task_id)

@router.post(
    "",
    summary="Créer un rapport (technicien assigné)",
    status_code=status.HTTP_201_CREATED,
    response_model=ReportOut,
)
def create_report(
    payload: ReportCreateIn,
    user: User = Depends(technicians),
    svc: ReportService = Depends(get_report_service),
):
    return svc.create(user, payload)

@router.put("/{report_id}", summary="Modifier un rapport", response_model=ReportOut)
def update_report(
    report_id: int,
    payload: ReportUpdateIn,
    user: User = Depends(get_current_user),
    svc: ReportService = Depends(get_report_service),
):
    return svc.update(user, report_id, payload)

@router.delete(
    "/{report_id}",
    summary="Supprimer un rapport (admin ou auteur)",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_report(report_id: int, user: User = Depends(get_current_user), svc: ReportService = Depends(get_report_service)):
    svc.delete(user, report_id)
    return None
