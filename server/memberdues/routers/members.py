from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from memberdues.auth.deps import get_current_member, require_roles
from memberdues.core.db import get_db
from memberdues.models.member import Member
from memberdues.models.user import User
from memberdues.schemas.member import MemberCreate, MemberOut, MemberUpdate
from memberdues.services import members as members_service

ADMIN_ROLES = ("admin",)

router = APIRouter(prefix="/members", tags=["members"])


def _member_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")


@router.get("", response_model=list[MemberOut], status_code=status.HTTP_200_OK)
def list_members(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> list[MemberOut]:
    return [MemberOut.from_orm(member) for member in members_service.list_members(db)]


@router.post("", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def create_member(
    payload: MemberCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> MemberOut:
    member = members_service.create_member(db, payload)
    return MemberOut.from_orm(member)


@router.get("/me", response_model=MemberOut, status_code=status.HTTP_200_OK)
def get_my_profile(member: Member = Depends(get_current_member)) -> MemberOut:
    return MemberOut.from_orm(member)


@router.get("/by-user/{user_id}", response_model=MemberOut, status_code=status.HTTP_200_OK)
def get_member_by_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> MemberOut:
    member = members_service.get_member_by_user(db, user_id)
    if not member:
        raise _member_not_found()
    return MemberOut.from_orm(member)


@router.get("/{member_id}", response_model=MemberOut, status_code=status.HTTP_200_OK)
def get_member(
    member_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> MemberOut:
    member = members_service.get_member(db, member_id)
    if not member:
        raise _member_not_found()
    return MemberOut.from_orm(member)


@router.patch("/{member_id}", response_model=MemberOut, status_code=status.HTTP_200_OK)
def update_member(
    member_id: int,
    payload: MemberUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> MemberOut:
    member = members_service.update_member(db, member_id, payload)
    if not member:
        raise _member_not_found()
    return MemberOut.from_orm(member)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_member(
    member_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(*ADMIN_ROLES)),
) -> Response:
    if not members_service.delete_member(db, member_id):
        raise _member_not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
