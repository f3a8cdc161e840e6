# pySensonet - Token Sources
# -*- coding: utf-8 -*-
"""
 Bearer token sources for the sensonet API.

 The API client only needs something with a token() method returning a
 valid access token; BearerAuth calls it before every request. Logging in
 with user name and password is not handled here: obtain a refresh token
 once (e.g. from the myVaillant app login) and let RefreshTokenSource keep
 the access token fresh.

 Class:
    StaticTokenSource(access_token) - Always returns the same token
    RefreshTokenSource(refresh_token, realm, access_token, expires_at, session, timeout)
        - Refreshes the access token with the OAuth refresh_token grant
    BearerAuth(token_source) - requests auth hook adding the Authorization header
"""

import logging
import threading
import time
from typing import Optional

import requests
from requests.auth import AuthBase

from pysensonet.const import CLIENT_ID, REALM_GERMANY, TOKEN_URL
from pysensonet.exceptions import TokenRefreshError

log = logging.getLogger(__name__)

REFRESH_TIMEOUT = 30  # Time in seconds to wait for refresh token response
EXPIRY_MARGIN = 30  # Refresh this many seconds before the token expires


class StaticTokenSource:
    def __init__(self, access_token: str):
        self.access_token = access_token

    def token(self) -> str:
        return self.access_token


class RefreshTokenSource:
    def __init__(self, refresh_token: str, realm: str = REALM_GERMANY, access_token: Optional[str] = None,
                 expires_at: Optional[float] = None, session=None, timeout: int = REFRESH_TIMEOUT):
        self.refresh_token = refresh_token
        self.realm = realm or REALM_GERMANY
        self.access_token = access_token
        self.expires_at = expires_at  # epoch seconds, None if unknown
        self.session = session or requests
        self.timeout = timeout
        self.lock = threading.Lock()

    @property
    def token_url(self) -> str:
        return TOKEN_URL.format(realm=self.realm)

    def valid(self) -> bool:
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        return time.time() < self.expires_at - EXPIRY_MARGIN

    def token(self) -> str:
        with self.lock:
            if not self.valid():
                self.new_token()
            return self.access_token

    def new_token(self):
        log.info("Token expired, refreshing token")
        data = {
            'grant_type': 'refresh_token',
            'client_id': CLIENT_ID,
            'refresh_token': self.refresh_token
        }
        headers = {
            'Content-Type': 'application/x-www-form-urlencoded'
        }
        try:
            response = self.session.post(self.token_url, data=data, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise TokenRefreshError(f"Unable to refresh token: {exc}") from exc
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        access = payload.get('access_token')
        if response.status_code > 201 or not access:
            log.error(f"Unable to refresh token. Response code: {response.status_code}")
            raise TokenRefreshError(f"Unable to refresh token. Response code: {response.status_code}")
        self.access_token = access
        # Keycloak rotates refresh tokens - keep the old one if none is returned
        self.refresh_token = payload.get('refresh_token') or self.refresh_token
        expires_in = payload.get('expires_in')
        self.expires_at = time.time() + float(expires_in) if expires_in else None
        log.info("Token refreshed")
        log.debug(f"  Response Code: {response.status_code}")

    def to_dict(self) -> dict:
        """Token fields for the caller to persist between runs."""
        return {
            'access_token': self.access_token,
            'refresh_token': self.refresh_token,
            'expires_at': self.expires_at,
            'realm': self.realm,
        }


class BearerAuth(AuthBase):
    def __init__(self, token_source):
        self.token_source = token_source

    def __call__(self, r):
        r.headers['Authorization'] = 'Bearer ' + self.token_source.token()
        return r
