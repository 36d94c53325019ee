"""
사용자 세션: 현재 요청의 인증된 사용자.

인증 자체는 호스트 프레임워크 담당. 여기서는 uid만 전달.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """인증된 사용자."""
    uid: str


class UserSession:
    """
    요청 단위 사용자 세션.

    user가 None이면 비로그인 상태.
    """

    def __init__(self, user: User | None = None) -> None:
        self._user = user

    @classmethod
    def from_user_id(cls, user_id: str | None) -> "UserSession":
        """빈 문자열/None → 비로그인 세션."""
        if not user_id:
            return cls(None)
        return cls(User(uid=user_id))

    def get_user(self) -> User | None:
        return self._user
