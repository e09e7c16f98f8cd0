import asyncio

from qobuz_label_scraper.lanes import RequestLane


def test_lane_runs_jobs_one_at_a_time_in_order():
    events = []

    async def job(name):
        events.append(("start", name))
        await asyncio.sleep(0.01)
        events.append(("end", name))
        return name

    async def main():
        lane = RequestLane("listing", 0)
        return await asyncio.gather(*(lane.schedule(job, n) for n in ("a", "b", "c")))

    assert asyncio.run(main()) == ["a", "b", "c"]
    assert events == [
        ("start", "a"), ("end", "a"),
        ("start", "b"), ("end", "b"),
        ("start", "c"), ("end", "c"),
    ]


def test_lane_enforces_min_interval():
    waits = []

    async def fake_sleep(seconds):
        waits.append(seconds)

    async def job():
        return None

    async def main():
        lane = RequestLane("album", 10.0, sleep=fake_sleep)
        await lane.schedule(job)
        await lane.schedule(job)
        await lane.schedule(job)
        return lane

    lane = asyncio.run(main())
    assert lane.dispatched == 3
    assert len(waits) == 2
    assert all(9.0 < w <= 10.0 for w in waits)


def test_two_lanes_overlap():
    active = set()
    overlapped = []

    async def job(name):
        active.add(name)
        await asyncio.sleep(0.02)
        if len(active) > 1:
            overlapped.append(name)
        active.discard(name)

    async def main():
        listing = RequestLane("listing", 0)
        album = RequestLane("album", 0)
        await asyncio.gather(listing.schedule(job, "listing"), album.schedule(job, "album"))

    asyncio.run(main())
    assert overlapped
