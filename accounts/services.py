from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.db import transaction

from .models import AppUser
from .security.app_jwt import issue_app_jwt

logger = logging.getLogger(__name__)


class IncompleteProfile(Exception):
    """Google userinfo 응답에 sub / email 이 없을 때"""


def profile_from_userinfo(userinfo: Dict[str, Any]) -> Dict[str, Optional[str]]:
    """
    OpenID userinfo → find_or_create_user 인자.
    name 이 없으면 given_name + family_name 으로 조립한다.
    """
    external_id = userinfo.get("sub")
    email = userinfo.get("email")
    if not external_id or not email:
        raise IncompleteProfile("userinfo is missing sub or email")

    name = userinfo.get("name") or " ".join(
        part for part in (userinfo.get("given_name"), userinfo.get("family_name")) if part
    )
    return {
        "external_id": str(external_id),
        "email": email,
        "name": name or email,
        "avatar_url": userinfo.get("picture"),
    }


def find_or_create_user(
    external_id: str,
    email: str,
    name: str,
    avatar_url: Optional[str] = None,
) -> AppUser:
    # 외부 provider 가 프로필의 source of truth → 로그인마다 덮어쓴다
    with transaction.atomic():
        user, created = AppUser.objects.update_or_create(
            external_id=external_id,
            defaults={"email": email, "name": name, "avatar_url": avatar_url},
        )

    if created:
        logger.info("user created id=%s", user.id)
    return user


def public_user(user: AppUser) -> Dict[str, Any]:
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "picture": user.avatar_url,
    }


def issue_session(user: AppUser) -> Dict[str, Any]:
    token = issue_app_jwt(
        user.id,
        {"email": user.email, "name": user.name, "picture": user.avatar_url},
    )
    return {"access_token": token, "user": public_user(user)}
