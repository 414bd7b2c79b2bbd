from datetime import datetime, timedelta, timezone

import jwt

from playerstats.core.config import JWTSettings
from playerstats.utils.security import Viewer, create_access_token, decode_user_id

SETTINGS = JWTSettings()


class TestTokens:
    def test_round_trip(self):
        token = create_access_token(42, settings=SETTINGS)
        assert decode_user_id(token, settings=SETTINGS) == 42

    def test_bearer_prefix_is_accepted(self):
        token = create_access_token(7, settings=SETTINGS)
        assert decode_user_id(f"Bearer {token}", settings=SETTINGS) == 7

    def test_expired_token(self):
        token = create_access_token(42, settings=SETTINGS, expires_minutes=-1)
        assert decode_user_id(token, settings=SETTINGS) is None

    def test_wrong_token_type(self):
        token = jwt.encode(
            {"id": "42", "type": "refresh", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            SETTINGS.secret_key,
            algorithm=SETTINGS.algorithm,
        )
        assert decode_user_id(token, settings=SETTINGS) is None

    def test_garbage(self):
        assert decode_user_id("not-a-jwt", settings=SETTINGS) is None


class TestViewer:
    def test_anonymous(self):
        viewer = Viewer()
        assert viewer.user_id == 0
        assert viewer.is_logged_in is False
