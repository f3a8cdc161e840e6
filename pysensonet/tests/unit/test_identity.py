import time
from unittest.mock import MagicMock

import pytest

from pysensonet.cloud.identity import RefreshTokenSource, StaticTokenSource
from pysensonet.const import CLIENT_ID
from pysensonet.exceptions import TokenRefreshError


def token_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    return response


def test_static_token_source():
    assert StaticTokenSource("abc").token() == "abc"


def test_refresh_when_missing():
    session = MagicMock()
    session.post.return_value = token_response(payload={'access_token': 'new-access', 'refresh_token': 'new-refresh',
                                                        'expires_in': 300})
    source = RefreshTokenSource("old-refresh", session=session)
    assert source.token() == 'new-access'
    args, kwargs = session.post.call_args
    assert args[0] == 'https://identity.vaillant-group.com/auth/realms/vaillant-germany-b2c/protocol/openid-connect/token'
    assert kwargs['data'] == {'grant_type': 'refresh_token', 'client_id': CLIENT_ID, 'refresh_token': 'old-refresh'}

    saved = source.to_dict()
    assert saved['refresh_token'] == 'new-refresh'
    assert saved['access_token'] == 'new-access'
    assert saved['expires_at'] > time.time()

    # Still valid - no second request
    assert source.token() == 'new-access'
    assert session.post.call_count == 1


def test_refresh_close_to_expiry():
    session = MagicMock()
    session.post.return_value = token_response(payload={'access_token': 'fresh', 'expires_in': 300})
    source = RefreshTokenSource("refresh", access_token="stale", expires_at=time.time() + 10, session=session)
    assert source.token() == 'fresh'
    assert source.refresh_token == 'refresh'


def test_valid_token_is_reused():
    session = MagicMock()
    source = RefreshTokenSource("refresh", access_token="current", expires_at=time.time() + 600, session=session)
    assert source.token() == 'current'
    session.post.assert_not_called()


def test_refresh_failure():
    session = MagicMock()
    session.post.return_value = token_response(status_code=400, payload={'error': 'invalid_grant'})
    source = RefreshTokenSource("revoked", session=session)
    with pytest.raises(TokenRefreshError):
        source.token()
