from typing import Protocol
from uuid import UUID

from humsafar.domain.entities import MemberProfile, ProfileImage


class MemberRepoPort(Protocol):
    def save(self, profile: MemberProfile) -> MemberProfile:
        ...

    def get_by_id(self, user_id: UUID) -> MemberProfile | None:
        ...

    def add_image(self, image: ProfileImage) -> ProfileImage:
        ...

    def erase(self, user_id: UUID) -> None:
        ...
