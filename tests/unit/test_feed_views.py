"""Feed assembly, enrichment, search and trending against both storage backends."""

from datetime import timedelta

import pytest
from conftest import START

from gameratez.errors import RateNotFoundError
from gameratez.games.catalog import GameCatalog
from gameratez.rates import service
from gameratez.rates.enrichment import enrich_rates
from gameratez.rates.feed import FeedQuery, get_visible_rate, list_feed, rank_games, search, trending
from gameratez.storage.base import FOLLOWS, USERS
from gameratez.storage.records import FollowRecord, RateRecord, UserRecord

CATALOG = GameCatalog()


async def _rate(store, handle, game, *, at, platform=None, scheduled_at=None, body="Great game"):
    return await service.create_rate(
        store,
        CATALOG,
        game_name=game,
        rating=8,
        body=body,
        rater_name=handle.title(),
        rater_handle=handle,
        now=at,
        platform=platform,
        scheduled_at=scheduled_at,
    )


def _at(minutes: int):
    return START + timedelta(minutes=minutes)


class TestEnrichment:
    @pytest.mark.asyncio
    async def test_counts_and_viewer_flags(self, store):
        rate = await _rate(store, "alice", "Hades", at=_at(0))
        other = await _rate(store, "alice", "Celeste", at=_at(1))
        await service.like_rate(store, rate.id, "bob", _at(2))
        await service.like_rate(store, rate.id, "carol", _at(2))
        await service.bookmark_rate(store, rate.id, "Bob", _at(3))
        await service.add_comment(store, rate.id, "carol", "Carol", "nice", _at(4))

        enriched = await enrich_rates(store, [rate, other], viewer="BOB")
        first, second = enriched
        assert (first.like_count, first.comment_count, first.bookmark_count) == (2, 1, 1)
        assert first.liked is True
        assert first.bookmarked is True
        assert (second.like_count, second.liked, second.bookmarked) == (0, False, False)

    @pytest.mark.asyncio
    async def test_no_viewer_means_no_flags(self, store):
        rate = await _rate(store, "alice", "Hades", at=_at(0))
        await service.like_rate(store, rate.id, "bob", _at(1))
        [enriched] = await enrich_rates(store, [rate])
        assert enriched.like_count == 1
        assert enriched.liked is False

    @pytest.mark.asyncio
    async def test_empty_input(self, store):
        assert await enrich_rates(store, []) == []


class TestFeedViews:
    @pytest.mark.asyncio
    async def test_global_newest_first(self, store):
        a = await _rate(store, "alice", "Hades", at=_at(0))
        b = await _rate(store, "bob", "Celeste", at=_at(1))
        feed = await list_feed(store, FeedQuery(), _at(2))
        assert [r.id for r in feed] == [b.id, a.id]

    @pytest.mark.asyncio
    async def test_following_takes_precedence(self, store):
        await _rate(store, "alice", "Hades", at=_at(0))
        b = await _rate(store, "Bob", "Celeste", at=_at(1))
        await store.insert(FOLLOWS, FollowRecord(follower_username="carol", followee_username="bob", created_at=START))

        feed = await list_feed(store, FeedQuery(tab="following", username="Carol", rater_handle="alice"), _at(2))
        assert [r.id for r in feed] == [b.id]

    @pytest.mark.asyncio
    async def test_following_with_no_follows_is_empty(self, store):
        await _rate(store, "alice", "Hades", at=_at(0))
        assert await list_feed(store, FeedQuery(tab="following", username="carol"), _at(1)) == []

    @pytest.mark.asyncio
    async def test_following_without_username_falls_through(self, store):
        a = await _rate(store, "alice", "Hades", at=_at(0))
        feed = await list_feed(store, FeedQuery(tab="following"), _at(1))
        assert [r.id for r in feed] == [a.id]

    @pytest.mark.asyncio
    async def test_bookmarked_view_sets_viewer(self, store):
        a = await _rate(store, "alice", "Hades", at=_at(0))
        await _rate(store, "alice", "Celeste", at=_at(1))
        await service.bookmark_rate(store, a.id, "bob", _at(2))

        feed = await list_feed(store, FeedQuery(bookmarked_by="BOB", rater_handle="zed"), _at(3))
        assert [r.id for r in feed] == [a.id]
        assert feed[0].bookmarked is True

    @pytest.mark.asyncio
    async def test_rater_view_is_case_insensitive(self, store):
        a = await _rate(store, "Alice", "Hades", at=_at(0))
        await _rate(store, "bob", "Hades", at=_at(1))
        feed = await list_feed(store, FeedQuery(rater_handle=" ALICE "), _at(2))
        assert [r.id for r in feed] == [a.id]

    @pytest.mark.asyncio
    async def test_platform_filter(self, store):
        pc = await _rate(store, "alice", "Hades", at=_at(0), platform="pc")
        await _rate(store, "alice", "Halo", at=_at(1), platform="xbox")
        await _rate(store, "alice", "Tetris", at=_at(2))
        feed = await list_feed(store, FeedQuery(platform="PC"), _at(3))
        assert [r.id for r in feed] == [pc.id]

        unknown = await list_feed(store, FeedQuery(platform="switch"), _at(3))
        assert len(unknown) == 3

    @pytest.mark.asyncio
    async def test_limit(self, store):
        for i in range(5):
            await _rate(store, "alice", f"Game {i}", at=_at(i))
        feed = await list_feed(store, FeedQuery(), _at(10), limit=3)
        assert [r.game_name for r in feed] == ["Game 4", "Game 3", "Game 2"]


class TestScheduledVisibility:
    @pytest.mark.asyncio
    async def test_hidden_until_due(self, store):
        scheduled = await _rate(store, "alice", "Hades", at=_at(0), scheduled_at=_at(60).isoformat())
        assert scheduled.created_at == _at(60)

        assert await list_feed(store, FeedQuery(), _at(59)) == []
        with pytest.raises(RateNotFoundError):
            await get_visible_rate(store, scheduled.id, None, _at(59))
        assert (await search(store, "hades", _at(59)))["rates"] == []
        assert await trending(store, _at(59)) == []

        assert [r.id for r in await list_feed(store, FeedQuery(), _at(60))] == [scheduled.id]
        assert (await get_visible_rate(store, scheduled.id, None, _at(60))).id == scheduled.id

    @pytest.mark.asyncio
    async def test_past_schedule_posts_now(self, store):
        rate = await _rate(store, "alice", "Hades", at=_at(10), scheduled_at=_at(0).isoformat())
        assert rate.created_at == _at(10)


class TestSearch:
    @pytest.mark.asyncio
    async def test_blank_query(self, store):
        assert await search(store, "   ", _at(0)) == {"users": [], "rates": []}

    @pytest.mark.asyncio
    async def test_matches_users_and_rates(self, store):
        await store.insert(
            USERS,
            UserRecord(
                id="profile-1",
                email="zelda@example.com",
                username="ZeldaFan",
                username_normalized="zeldafan",
                display_name="Link",
                created_at=START,
            ),
        )
        match_game = await _rate(store, "alice", "Zelda: Breath of the Wild", at=_at(0))
        match_body = await _rate(store, "bob", "Hades", at=_at(1), body="Better than zelda")
        await _rate(store, "carol", "Celeste", at=_at(2))

        result = await search(store, "ZELDA", _at(3))
        assert result["users"] == [{"username": "ZeldaFan", "display_name": "Link"}]
        assert [r.id for r in result["rates"]] == [match_body.id, match_game.id]

    @pytest.mark.asyncio
    async def test_matches_rater_handle(self, store):
        rate = await _rate(store, "speedrunner", "Celeste", at=_at(0))
        result = await search(store, "runner", _at(1))
        assert [r.id for r in result["rates"]] == [rate.id]


class TestTrending:
    @pytest.mark.asyncio
    async def test_counts_and_order(self, store):
        plan = ["A", "B", "B", "C", "B", "A", "B", "A", "B"]
        for i, game in enumerate(plan):
            await _rate(store, "alice", game, at=_at(i))
        result = await trending(store, _at(20))
        assert result == [
            {"rank": 1, "game_name": "B", "count": 5},
            {"rank": 2, "game_name": "A", "count": 3},
            {"rank": 3, "game_name": "C", "count": 1},
        ]

    @pytest.mark.asyncio
    async def test_at_most_five(self, store):
        for i in range(7):
            await _rate(store, "alice", f"Game {i}", at=_at(i))
        assert len(await trending(store, _at(20))) == 5


def _bare(game: str, minutes: int) -> RateRecord:
    return RateRecord(
        id=f"rate-{minutes}",
        rater_name="A",
        rater_handle="a",
        rater_handle_normalized="a",
        game_name=game,
        rating=5,
        body="x",
        created_at=_at(minutes),
    )


class TestRankGames:
    def test_groups_case_insensitively_with_first_seen_casing(self):
        rates = [_bare("hades", 0), _bare("HADES", 1), _bare(" Hades ", 2), _bare("Celeste", 3)]
        assert rank_games(rates) == [
            {"rank": 1, "game_name": "hades", "count": 3},
            {"rank": 2, "game_name": "Celeste", "count": 1},
        ]

    def test_ties_keep_first_seen_order(self):
        rates = [_bare("Celeste", 0), _bare("Hades", 1), _bare("Hades", 2), _bare("Celeste", 3)]
        assert [g["game_name"] for g in rank_games(rates)] == ["Celeste", "Hades"]

    def test_size(self):
        rates = [_bare(f"G{i}", i) for i in range(3)]
        assert len(rank_games(rates, size=2)) == 2
