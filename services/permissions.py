"""
services/permissions.py

역할(role) → 권한(permission) 확인
- 권한 ID 형식: "MODULE.action" (예: GRADES.read, GRADES.write)
- 학교 설정(role_permissions)이 있으면 그것을, 없으면 기본 권한표를 사용
"""

from typing import Dict, List, Mapping, Optional, Sequence

ROLES = ("SUPER_ADMIN", "ADMIN", "BURSAR", "TEACHER", "STUDENT", "PARENT", "LIBRARIAN")

# ✅ 기본 권한표 (이 서비스가 다루는 모듈만)
DEFAULT_PERMISSIONS: Dict[str, List[str]] = {
    "SUPER_ADMIN": ["STUDENTS.read", "STUDENTS.enroll", "GRADES.read", "GRADES.write", "SETTINGS.write"],
    "ADMIN": ["STUDENTS.read", "STUDENTS.enroll", "GRADES.read", "GRADES.write", "SETTINGS.write"],
    "TEACHER": ["STUDENTS.read", "GRADES.read", "GRADES.write"],
    "STUDENT": ["GRADES.read"],
    "PARENT": ["GRADES.read"],
    "BURSAR": ["STUDENTS.read"],
    "LIBRARIAN": ["STUDENTS.read"],
}


def has_permission(
    role: str,
    permission: str,
    role_permissions: Optional[Mapping[str, Sequence[str]]] = None,
) -> bool:
    permissions = (role_permissions or DEFAULT_PERMISSIONS).get(role.upper(), [])
    return permission in permissions
