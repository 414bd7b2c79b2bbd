import pytest

from playerstats.models.players import PluginSetting
from playerstats.models.users import Users
from playerstats.utils.clock import utcnow
from playerstats.utils.security import create_access_token

ADMIN = "/api/v1/admin"
PUBLIC = "/api/v1/public"


@pytest.fixture
async def player_id(client, payload):
    response = await client.post(f"{ADMIN}/player", json=payload)
    assert response.status_code == 200
    return response.json()["player_id"]


@pytest.fixture
async def member_headers(db):
    user = Users(display_name="Member", email="member@example.com")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "ok"}


class TestPlayersApi:
    async def test_create_returns_shortcode_and_list(self, client, payload):
        response = await client.post(f"{ADMIN}/player", json=payload)

        body = response.json()
        assert response.status_code == 200
        assert body["shortcode"] == f"[video-player id='{body['player_id']}']"
        assert body["players"][0]["title"] == "Intro"
        assert body["players"][0]["row"] == 1

    async def test_missing_section_is_bad_request(self, client, payload):
        del payload["actionBar"]

        response = await client.post(f"{ADMIN}/player", json=payload)

        assert response.status_code == 400
        assert response.json()["code"] == "bad-request"

    async def test_options_roundtrip(self, client, player_id):
        response = await client.put(f"{ADMIN}/options/player/{player_id}", json={"ads": {"enabled": True}})
        assert response.status_code == 200
        assert response.json()["ads"] == {"enabled": True}

        option = await client.get(f"{ADMIN}/option/player/{player_id}/ads")
        assert option.json() == {"ads": {"enabled": True}, "videos": response.json()["videos"]}

    async def test_delete_player(self, client, player_id):
        response = await client.delete(f"{ADMIN}/player/{player_id}")
        assert response.json()["code"] == "success"

        missing = await client.get(f"{ADMIN}/options/player/{player_id}")
        assert missing.status_code == 404
        assert missing.json() == {"code": "not-found", "message": "No player found with this ID"}


class TestStatisticsApi:
    async def test_unknown_player(self, client):
        response = await client.get(f"{ADMIN}/statistics/player/999")
        assert response.status_code == 404

    async def test_record_view_then_summary(self, client, player_id):
        recorded = await client.post(f"{PUBLIC}/statistic/player/{player_id}/view")
        assert recorded.status_code == 200
        assert recorded.json()["statistics"]["view"] == 1

        summary = (await client.get(f"{ADMIN}/statistics/player/{player_id}")).json()
        assert summary["view"] == {"count": 1, "rate": 100.0, "type": "increase"}
        assert summary["like"] == {"count": 0, "rate": 0.0, "type": "equal"}

    async def test_unknown_statistic_type(self, client, player_id):
        response = await client.post(f"{PUBLIC}/statistic/player/{player_id}/share")
        assert response.status_code == 400

    async def test_duplicate_like_conflicts(self, client, player_id, member_headers):
        url = f"{PUBLIC}/statistic/player/{player_id}/like"
        assert (await client.post(url, headers=member_headers)).status_code == 200

        response = await client.post(url, headers=member_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "duplicate-reaction"

        player = (await client.get(f"{PUBLIC}/player/{player_id}", headers=member_headers)).json()
        assert player["activity"] == {"like": True, "dislike": False}
        assert player["user"]["is_logged_in"] is True

    async def test_delete_event(self, client, player_id):
        recorded = (await client.post(f"{PUBLIC}/statistic/player/{player_id}/dislike")).json()

        response = await client.delete(f"{PUBLIC}/statistic/player/{player_id}/{recorded['statistic_id']}")

        assert response.json() == {"statistics": {"like": 0, "dislike": 0, "comment": 0, "view": 0}}

    async def test_chart_shape(self, client, player_id):
        series = (await client.get(f"{ADMIN}/statistics/player/{player_id}/chart")).json()
        assert [s["id"] for s in series] == ["like", "dislike", "comment", "view"]
        assert all(len(s["data"]) == 12 for s in series)

    async def test_countries_need_api_key(self, client, player_id):
        response = await client.get(f"{ADMIN}/statistics/player/{player_id}/countries")
        assert response.status_code == 211
        assert response.json()["code"] == "api-key-not-found"

    async def test_countries_invalid_compare(self, client, player_id, db):
        db.add(PluginSetting(key="api_key", value="token"))
        await db.commit()

        response = await client.get(f"{ADMIN}/statistics/player/{player_id}/countries", params={"compare": "hour"})

        assert response.status_code == 400
        assert response.json()["code"] == "invalid-compare"

    async def test_year_dimension(self, client, player_id):
        await client.post(f"{PUBLIC}/statistic/player/{player_id}/view")

        today = utcnow()
        body = (await client.get(f"{ADMIN}/statistics/player/{player_id}/year/{today.year}")).json()

        assert body["view"] == ["1", today.strftime("%Y-%m-%d")]
        assert body["like"] == 0

    async def test_invalid_range(self, client, player_id):
        response = await client.get(f"{ADMIN}/statistics/player/{player_id}/range/2024-01-01/never")
        assert response.status_code == 400


class TestNotificationsApi:
    async def test_list_and_mark_read(self, client, player_id):
        await client.post(f"{PUBLIC}/statistic/player/{player_id}/like")

        items = (await client.get(f"{ADMIN}/notifications", params={"status": "new"})).json()
        assert len(items) == 1
        assert items[0]["message"] == "New like for Intro"

        marked = await client.put(f"{ADMIN}/notification/{items[0]['id']}")
        assert marked.status_code == 200

        assert (await client.get(f"{ADMIN}/notifications", params={"status": "new"})).json() == []

    async def test_invalid_status(self, client):
        response = await client.get(f"{ADMIN}/notifications", params={"status": "old"})
        assert response.status_code == 404

    async def test_empty_status_means_all(self, client, player_id):
        await client.post(f"{PUBLIC}/statistic/player/{player_id}/like")

        response = await client.get(f"{ADMIN}/notifications?status=")

        assert response.status_code == 200
        assert len(response.json()) == 1


class TestCommentsApi:
    async def test_guest_comment_flow(self, client, player_id):
        posted = await client.post(
            f"{PUBLIC}/comment/player/{player_id}",
            json={"comment": "Lovely", "author": {"name": "Sam", "email": "sam@example.com"}},
        )
        assert posted.status_code == 200

        public = (await client.get(f"{PUBLIC}/comments/player/{player_id}")).json()
        assert public == {"comments": [], "count": 0}

        admin = (await client.get(f"{ADMIN}/comments")).json()
        assert admin[0]["user_id"] == "Guest"

        approved = await client.put(f"{ADMIN}/comment/{admin[0]['id']}/approve")
        assert approved.json()[0]["approved"] == 1

        public = (await client.get(f"{PUBLIC}/comments/player/{player_id}")).json()
        assert public["count"] == 1

        totals = (await client.get(f"{ADMIN}/statistics/player/{player_id}/comments")).json()
        assert totals == {"total": 1, "approved": 1, "rejected": 0, "pending": 0}

    async def test_ban_blocks_commenter(self, client, player_id):
        ban = {"user_id": 0, "email": "sam@example.com", "ip": "203.0.113.9", "note": "spam", "banned_for": "ever"}
        assert (await client.post(f"{ADMIN}/ban-user", json=ban)).status_code == 200

        status = await client.get(f"{PUBLIC}/is-banned", params={"identifier": "sam@example.com"})
        assert status.status_code == 403
        assert status.json()["code"] == "is-banned"

        posted = await client.post(
            f"{PUBLIC}/comment/player/{player_id}",
            json={"comment": "again", "author": {"name": "Sam", "email": "sam@example.com"}},
        )
        assert posted.status_code == 403

    async def test_not_banned(self, client):
        response = await client.get(f"{PUBLIC}/is-banned", params={"identifier": "ok@example.com"})
        assert response.json() == {"banned": False, "message": "Not banned"}


class TestViewerApi:
    async def test_anonymous_is_not_logged_in(self, client):
        response = await client.get(f"{PUBLIC}/is-logged-in")
        assert response.status_code == 213

    async def test_member_profile(self, client, member_headers):
        response = await client.get(f"{PUBLIC}/is-logged-in", headers=member_headers)
        body = response.json()
        assert body["email"] == "member@example.com"
        assert body["is_banned"] is False


class TestEmailFormApi:
    async def test_saved_email_is_listed(self, client, player_id):
        posted = await client.post(f"{PUBLIC}/email-form/player/{player_id}", json={"email": "fan@example.com"})
        assert posted.status_code == 200

        emails = (await client.get(f"{ADMIN}/user-emails/{player_id}")).json()
        assert [e["email"] for e in emails] == ["fan@example.com"]

        remaining = (await client.delete(f"{ADMIN}/delete-email/{emails[0]['id']}")).json()
        assert remaining == []


class TestSettingsApi:
    async def test_empty_settings(self, client):
        response = await client.get(f"{ADMIN}/settings")
        assert response.json() == {}
