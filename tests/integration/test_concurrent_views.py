"""Concurrent charging of the same (viewer, target) pair."""

from concurrent.futures import ThreadPoolExecutor

from humsafar.domain.entities import ProfileView
from humsafar.domain.errors import AlreadyViewedError

WORKERS = 8


def test_parallel_inserts_store_one_row(test_ctx, member_factory):
    viewer = member_factory()
    target = member_factory()
    repo = test_ctx.view_repo

    def insert(_):
        return repo.insert_if_absent(
            ProfileView(viewer_user_id=viewer, viewed_profile_user_id=target)
        )

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(insert, range(WORKERS)))

    assert results.count(True) == 1
    assert repo.count_for_viewer(viewer) == 1


def test_parallel_record_view_charges_once(test_ctx, member_factory):
    viewer = member_factory(views_limit=5)
    target = member_factory()

    def open_profile(_):
        try:
            return test_ctx.view_service.record_view(viewer, target)
        except AlreadyViewedError:
            return None

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        outcomes = list(pool.map(open_profile, range(WORKERS)))

    charged = [o for o in outcomes if o is not None]
    assert len(charged) == 1
    assert charged[0].remaining == 4

    stats = test_ctx.view_service.get_view_stats(viewer)
    assert stats.consumed == 1
    assert stats.remaining == 4
