"""Tests for permutation, per-category pools and dedup."""

import random

from dancemix.models.song import Song
from dancemix.pools import DedupFilter, SourcePool, permute
from tests.conftest import make_songs


class TestPermute:

    def test_is_a_permutation(self):
        songs = make_songs("a", 20)
        out = permute(songs, random.Random(3))
        assert sorted(s.id for s in out) == sorted(s.id for s in songs)

    def test_does_not_touch_input(self):
        songs = make_songs("a", 10)
        before = list(songs)
        permute(songs, random.Random(1))
        assert songs == before

    def test_seeded_is_reproducible(self):
        songs = make_songs("a", 15)
        assert permute(songs, random.Random(42)) == permute(songs, random.Random(42))

    def test_empty_and_single(self):
        assert permute([], random.Random(0)) == []
        one = make_songs("a", 1)
        assert permute(one, random.Random(0)) == one


class TestSourcePool:

    def test_manual_first_then_base(self):
        manual = make_songs("m", 2)
        base = make_songs("b", 3)
        pool = SourcePool("A", base, manual, shuffle=False)
        drawn = [pool.next() for _ in range(5)]
        assert [s.id for s in drawn] == ["m0", "m1", "b0", "b1", "b2"]
        assert pool.next() is None

    def test_base_order_fixed_by_one_shuffle(self):
        base = make_songs("b", 12)
        pool = SourcePool("A", base, rng=random.Random(7))
        expected = permute(base, random.Random(7))
        assert [pool.next() for _ in range(12)] == expected

    def test_manual_only(self):
        pool = SourcePool("A", make_songs("b", 3), make_songs("m", 1), allow_base_fill=False)
        assert pool.next().id == "m0"
        assert pool.next() is None
        assert pool.exhausted

    def test_ordered_keeps_supplied_order(self):
        songs = make_songs("c", 8)
        pool = SourcePool.ordered("Collective", songs)
        assert [pool.next() for _ in range(8)] == songs

    def test_remaining_counts_down(self):
        pool = SourcePool("A", make_songs("b", 2), make_songs("m", 1))
        assert pool.remaining == 3
        pool.next()
        pool.next()
        assert pool.remaining == 1
        assert not pool.exhausted
        pool.next()
        assert pool.exhausted

    def test_empty_pool(self):
        pool = SourcePool("A")
        assert pool.next() is None
        assert pool.exhausted


class TestDedupFilter:

    def test_accepts_once(self):
        dedup = DedupFilter()
        song = Song(id=1, duration_ms=1000)
        assert dedup.accept(song)
        assert not dedup.accept(song)
        assert not dedup.accept(Song(id=1, title="other copy"))

    def test_distinct_ids(self):
        dedup = DedupFilter()
        assert dedup.accept(Song(id="x"))
        assert dedup.accept(Song(id="y"))
        assert not dedup.accept(Song(id="x"))
