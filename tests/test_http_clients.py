import httpx
import pytest

from playerstats.core.config import GeoSettings, SupportSettings
from playerstats.core.errors import UpstreamError
from playerstats.schemas.settings import SupportTicket
from playerstats.services.geolocation import IpInfoClient, country_name
from playerstats.services.support_service import SupportService

GEO_SETTINGS = GeoSettings(IPINFO_URL="https://geo.example.com/")
SUPPORT_SETTINGS = SupportSettings(
    SUPPORT_EMAIL="help@example.com",
    SITE_URL="https://blog.example.com",
    SUPPORT_BANNED_URL_CHECK="https://support.example.com/check",
    SUPPORT_FEATURES_URL="https://support.example.com/features",
)


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestIpInfoClient:
    async def test_lookup_parses_location(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(
                200,
                json={
                    "ip": "8.8.8.8",
                    "city": "Mountain View",
                    "region": "California",
                    "country": "US",
                    "loc": "37.4056,-122.0775",
                    "postal": "94043",
                },
            )

        geo = IpInfoClient("token-1", settings=GEO_SETTINGS, client=mock_client(handler))
        record = await geo.lookup("8.8.8.8")
        await geo.close()

        assert seen["url"] == "https://geo.example.com/8.8.8.8?token=token-1"
        assert record.country == "US"
        assert record.country_name == "United States"
        assert record.region == "California"
        assert (record.latitude, record.longitude) == ("37.4056", "-122.0775")

    async def test_lookup_without_key_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        geo = IpInfoClient(None, settings=GEO_SETTINGS, client=mock_client(handler))
        assert await geo.lookup("8.8.8.8") is None

    async def test_bogon_address(self):
        geo = IpInfoClient(
            "token-1",
            settings=GEO_SETTINGS,
            client=mock_client(lambda request: httpx.Response(200, json={"ip": "127.0.0.1", "bogon": True})),
        )
        assert await geo.lookup("127.0.0.1") is None

    async def test_lookup_error_carries_upstream_status(self):
        geo = IpInfoClient(
            "token-1",
            settings=GEO_SETTINGS,
            client=mock_client(
                lambda request: httpx.Response(429, json={"error": {"title": "Rate limit", "message": "Too many"}})
            ),
        )

        with pytest.raises(UpstreamError) as exc_info:
            await geo.lookup("8.8.8.8")

        assert exc_info.value.status_code == 429
        assert exc_info.value.message == "Too many"

    async def test_rejected_token(self):
        geo = IpInfoClient(
            "bad",
            settings=GEO_SETTINGS,
            client=mock_client(lambda request: httpx.Response(403, json={"error": "Invalid token"})),
        )

        with pytest.raises(UpstreamError) as exc_info:
            await geo.verify_token()

        assert exc_info.value.status_code == 216
        assert exc_info.value.message == "Invalid token"

    async def test_accepted_token(self):
        geo = IpInfoClient(
            "good",
            settings=GEO_SETTINGS,
            client=mock_client(lambda request: httpx.Response(200, json={"ip": "1.1.1.1"})),
        )
        await geo.verify_token()

    async def test_country_code_is_resolved_to_name(self):
        geo = IpInfoClient(
            "token-1",
            settings=GEO_SETTINGS,
            client=mock_client(
                lambda request: httpx.Response(200, json={"ip": "85.214.132.117", "country": "DE", "city": "Berlin"})
            ),
        )

        record = await geo.lookup("85.214.132.117")

        assert record.country == "DE"
        assert record.country_name == "Germany"

    async def test_provider_country_name_is_kept(self):
        geo = IpInfoClient(
            "token-1",
            settings=GEO_SETTINGS,
            client=mock_client(
                lambda request: httpx.Response(200, json={"country": "GB", "country_name": "United Kingdom"})
            ),
        )

        record = await geo.lookup("81.2.69.160")

        assert record.country_name == "United Kingdom"


class TestCountryName:
    def test_lowercase_code(self):
        assert country_name("us") == "United States"

    def test_unknown_code_falls_back_to_code(self):
        assert country_name("XX") == "XX"

    def test_missing_code(self):
        assert country_name(None) is None


class TestSupportService:
    async def test_ticket_is_mailed_to_support(self, mail_queue):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["site"] = request.headers.get("url")
            return httpx.Response(200, json={"code": "ok"})

        support = SupportService(mail_queue, settings=SUPPORT_SETTINGS, client=mock_client(handler))
        ticket = SupportTicket(name="Ana", email="ana@example.com", subject="Help", message="Player is blank")

        await support.send_ticket(ticket)

        assert seen == {"url": "https://support.example.com/check", "site": "https://blog.example.com"}
        assert len(mail_queue.sent) == 1
        sent = mail_queue.sent[0]
        assert sent["to"] == "help@example.com"
        assert sent["subject"] == "Help"
        assert "Player is blank" in sent["body"]
        assert "ana@example.com" in sent["body"]

    async def test_ticket_markup_is_escaped(self, mail_queue):
        support = SupportService(
            mail_queue,
            settings=SUPPORT_SETTINGS,
            client=mock_client(lambda request: httpx.Response(200, json={"code": "ok"})),
        )
        ticket = SupportTicket(
            name="<b>Ana</b>",
            email="ana@example.com",
            subject="Help",
            message="<script>alert(1)</script>",
        )

        await support.send_ticket(ticket)

        body = mail_queue.sent[0]["body"]
        assert "<script>" not in body
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
        assert "&lt;b&gt;Ana&lt;/b&gt;" in body

    async def test_banned_site_is_refused(self, mail_queue):
        support = SupportService(
            mail_queue,
            settings=SUPPORT_SETTINGS,
            client=mock_client(
                lambda request: httpx.Response(403, json={"code": "Banned Url", "message": "This site is banned"})
            ),
        )
        ticket = SupportTicket(name="Ana", email="ana@example.com", subject="Help", message="Hi")

        with pytest.raises(UpstreamError) as exc_info:
            await support.send_ticket(ticket)

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "banned-url"
        assert exc_info.value.message == "This site is banned"
        assert mail_queue.sent == []

    async def test_whats_new(self, mail_queue):
        def handler(request):
            assert request.url.params["item"] == "playerstats"
            return httpx.Response(200, json={"data": {"features": [{"title": "Dark mode"}]}})

        support = SupportService(mail_queue, settings=SUPPORT_SETTINGS, client=mock_client(handler))

        assert await support.whats_new() == [{"title": "Dark mode"}]
