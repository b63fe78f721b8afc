import asyncio
from unittest.mock import AsyncMock

import pytest

from photofeed.errors import (
    AlreadyFollowed,
    FollowNotFound,
    SelfFollowError,
    SelfUnfollowError,
    UserNotFound,
)
from photofeed.schemas import FollowRequest
from photofeed.services.follow import RelationshipService
from photofeed.storage.follows import FollowStorage
from photofeed.storage.users import UserStorage


@pytest.fixture
def service(db, notifier):
    return RelationshipService(FollowStorage(db), UserStorage(db), notifier, notify_timeout=1)


@pytest.mark.asyncio
async def test_follow_publishes_after_insert(service, notifier, make_user):
    alice, bob = await make_user(), await make_user()

    await service.follow(FollowRequest(follower_id=alice, following_id=bob))

    assert notifier.events == [
        {"topic": "follow", "payload": {"follower_id": alice, "following_id": bob}}
    ]
    followers = await service.followers(bob)
    assert [f.username for f in followers] == ["user1"]


@pytest.mark.asyncio
async def test_self_follow_touches_nothing(notifier):
    follows = AsyncMock(spec=FollowStorage)
    users = AsyncMock(spec=UserStorage)
    service = RelationshipService(follows, users, notifier, notify_timeout=1)

    with pytest.raises(SelfFollowError):
        await service.follow(FollowRequest(follower_id=3, following_id=3))
    with pytest.raises(SelfUnfollowError):
        await service.unfollow(FollowRequest(follower_id=3, following_id=3))

    assert follows.method_calls == []
    assert users.method_calls == []
    assert notifier.events == []


@pytest.mark.asyncio
async def test_second_follow_conflicts_and_emits_once(service, notifier, make_user):
    alice, bob = await make_user(), await make_user()
    req = FollowRequest(follower_id=alice, following_id=bob)

    await service.follow(req)
    with pytest.raises(AlreadyFollowed):
        await service.follow(req)

    assert notifier.topics() == ["follow"]


@pytest.mark.asyncio
async def test_follow_unknown_user(service, notifier, make_user):
    alice = await make_user()

    with pytest.raises(UserNotFound):
        await service.follow(FollowRequest(follower_id=alice, following_id=999))

    assert notifier.events == []


@pytest.mark.asyncio
async def test_unfollow_round_trip(service, notifier, make_user):
    alice, bob = await make_user(), await make_user()
    req = FollowRequest(follower_id=alice, following_id=bob)

    await service.follow(req)
    await service.unfollow(req)

    assert notifier.topics() == ["follow", "unfollow"]
    assert await service.followers(bob) == []
    assert await service.following(alice) == []


@pytest.mark.asyncio
async def test_unfollow_without_edge(service, notifier, make_user):
    alice, bob = await make_user(), await make_user()

    with pytest.raises(FollowNotFound):
        await service.unfollow(FollowRequest(follower_id=alice, following_id=bob))

    assert notifier.events == []


@pytest.mark.asyncio
async def test_follow_survives_a_broken_broker(service, notifier, make_user):
    alice, bob = await make_user(), await make_user()
    notifier.error = ConnectionError("broker down")

    await service.follow(FollowRequest(follower_id=alice, following_id=bob))

    # The edge is persisted even though nothing was published
    assert [f.username for f in await service.following(alice)] == ["user2"]


@pytest.mark.asyncio
async def test_follow_survives_a_slow_broker(db, make_user):
    class StuckNotifier:
        async def publish(self, topic, payload):
            await asyncio.sleep(10)

    service = RelationshipService(
        FollowStorage(db), UserStorage(db), StuckNotifier(), notify_timeout=0.05
    )
    alice, bob = await make_user(), await make_user()

    await service.follow(FollowRequest(follower_id=alice, following_id=bob))

    assert len(await service.followers(bob)) == 1


@pytest.mark.asyncio
async def test_listings_for_unknown_user(service):
    with pytest.raises(UserNotFound):
        await service.followers(404)
    with pytest.raises(UserNotFound):
        await service.following(404)
