from datetime import datetime

from playerstats.services.chart_service import MONTH_LABELS, ChartService


class TestYearChart:
    async def test_empty_player_gets_full_grid(self, db, make_player, now):
        player = await make_player()

        series = await ChartService(db).build_year_chart(player.id, now=now)

        assert [s.id for s in series] == ["like", "dislike", "comment", "view"]
        for item in series:
            assert len(item.data) == 12
            assert [point.x for point in item.data] == list(MONTH_LABELS)
            assert all(point.y == 0 for point in item.data)

    async def test_events_land_in_their_month(self, db, make_player, add_event, now):
        player = await make_player()
        await add_event(player.id, "like", created=datetime(2024, 3, 2, 10, 0))
        await add_event(player.id, "view", created=datetime(2024, 1, 9, 10, 0))
        await add_event(player.id, "view", created=datetime(2024, 1, 10, 10, 0))
        # Previous year is ignored.
        await add_event(player.id, "like", created=datetime(2023, 3, 2, 10, 0))

        series = {s.id: s for s in await ChartService(db).build_year_chart(player.id, now=now)}

        assert series["like"].data[2].x == "Mar"
        assert series["like"].data[2].y == 1
        assert sum(point.y for point in series["like"].data) == 1
        assert series["view"].data[0].y == 2
