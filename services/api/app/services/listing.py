"""
Pagination and author enrichment shared by every listing endpoint.

has_more is a heuristic: it is True whenever a page comes back exactly full,
including a full last page. Clients simply get one extra empty page in that
case.
"""
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Profile
from app.schemas import Pagination, ProfileSummary
from app.services.profiles import ProfileService

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 50


@dataclass(frozen=True)
class Page:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pagination(self, returned: int) -> Pagination:
        return Pagination(page=self.page, limit=self.limit, has_more=returned == self.limit)


def profile_summary(profiles: dict[str, Profile], user_id: str) -> ProfileSummary:
    """Author block for user_id; a bare {user_id} stub when no profile row exists."""
    profile = profiles.get(user_id)
    if profile is None:
        return ProfileSummary(user_id=user_id)
    return ProfileSummary.model_validate(profile)


async def load_authors(db: AsyncSession, user_ids: Iterable[str]) -> dict[str, Profile]:
    return await ProfileService(db).get_many(user_ids)
