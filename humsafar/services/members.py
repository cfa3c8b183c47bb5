from uuid import UUID, uuid4

from humsafar.components.moderation import ModerationService
from humsafar.domain.entities import MemberProfile, ModerationRecord, ProfileImage
from humsafar.domain.errors import NotFoundError, StoreError
from humsafar.ports.clock import ClockPort
from humsafar.ports.members import MemberRepoPort


class MemberService:
    """Registration, photos and erasure of member profiles."""

    def __init__(self, repo: MemberRepoPort, moderation: ModerationService, clock: ClockPort):
        self.repo = repo
        self.moderation = moderation
        self.clock = clock

    def register(self, profile: MemberProfile) -> tuple[MemberProfile, ModerationRecord]:
        """
        Store the profile and its moderation record.

        A new profile whose moderation record cannot be written is erased
        again; calling register a second time is safe.
        """
        # Profile first: the moderation record references it
        is_new = self.repo.get_by_id(profile.user_id) is None
        now = self.clock.now_utc()
        stored = self.repo.save(profile.model_copy(update={"created_at": now, "updated_at": now}))
        try:
            record = self.moderation.create_for_new_member(stored.user_id)
        except StoreError:
            if is_new:
                self.repo.erase(stored.user_id)
            raise
        return stored, record

    def get(self, user_id: UUID) -> MemberProfile:
        profile = self.repo.get_by_id(user_id)
        if profile is None:
            raise NotFoundError("profile", user_id)
        return profile

    def add_image(self, user_id: UUID, image_url: str, is_main: bool = False) -> ProfileImage:
        self.get(user_id)
        image = ProfileImage(
            id=uuid4(),
            user_id=user_id,
            image_url=image_url,
            is_main=is_main,
            created_at=self.clock.now_utc(),
        )
        return self.repo.add_image(image)

    def erase(self, user_id: UUID) -> None:
        """Hard delete: profile, images, moderation record, payments and views."""
        self.get(user_id)
        self.repo.erase(user_id)
