from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from memberdues.auth.deps import ensure_member_access, get_current_member, get_current_user, require_roles
from memberdues.core.db import get_db
from memberdues.models.member import Member
from memberdues.models.user import User
from memberdues.schemas.dashboard import AdminDashboard, MemberDashboard
from memberdues.services import dashboard as dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/admin", response_model=AdminDashboard, status_code=status.HTTP_200_OK)
def admin_dashboard(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles("admin")),
) -> AdminDashboard:
    return dashboard_service.get_admin_dashboard(db)


@router.get("/me", response_model=MemberDashboard, status_code=status.HTTP_200_OK)
def my_dashboard(
    member: Member = Depends(get_current_member),
    db: Session = Depends(get_db),
) -> MemberDashboard:
    return dashboard_service.get_member_dashboard(db, member.id)


@router.get("/members/{member_id}", response_model=MemberDashboard, status_code=status.HTTP_200_OK)
def member_dashboard(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MemberDashboard:
    ensure_member_access(current_user, member_id, db)
    dashboard = dashboard_service.get_member_dashboard(db, member_id)
    if dashboard is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return dashboard
