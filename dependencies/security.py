from typing import Optional, Annotated
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session
from database.db import get_db
from models.schools import School as SchoolModel
from services.permissions import has_permission
import logging

logger = logging.getLogger(__name__)

RoleHeader = Annotated[Optional[str], Header(alias="X-User-Role")]
SchoolHeader = Annotated[Optional[int], Header(alias="X-School-Id")]


def require_permission(permission: str):
    """
    라우터 의존성 팩토리
    - 인증은 외부(프론트/게이트웨이) 책임: 여기서는 X-User-Role 헤더만 확인
    - X-School-Id 가 있으면 그 학교의 role_permissions 설정을 우선 적용
    """
    def _checker(
        role: RoleHeader = None,
        header_school_id: SchoolHeader = None,
        db: Session = Depends(get_db),
    ):
        if not role:
            raise HTTPException(status_code=401, detail="Missing X-User-Role header")

        role_permissions = None
        if header_school_id is not None:
            school = db.query(SchoolModel).filter(SchoolModel.id == header_school_id).first()
            if school is not None:
                role_permissions = school.role_permissions

        if not has_permission(role, permission, role_permissions):
            logger.warning("permission denied: role=%s permission=%s school=%s", role, permission, header_school_id)
            raise HTTPException(status_code=403, detail=f"Permission '{permission}' required")

        return {"role": role.upper(), "school_id": header_school_id}

    return _checker
