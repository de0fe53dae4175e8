"""
AT Protocol Repository Client

Minimal XRPC client for the personal data server that hosts mirrored score
records. Built on requests; it never retries on its own, token renewal is
layered on with ``retry_on_expired_session``.
"""

from typing import Any, Dict, Optional

import requests

from ..utils.decorators import retry_on_expired_session


class AtprotoError(Exception):
    """Error answered by the repository host (or a transport failure)."""

    def __init__(self, message: str, status: Optional[int] = None, error: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.error = error


class ExpiredToken(AtprotoError):
    """The access token has expired."""


class AuthenticationRequired(AtprotoError):
    """The host rejected the credentials or session."""


class AtprotoClient:
    """
    XRPC client bound to one service account.

    ``login`` must succeed before authenticated calls; ``session`` holds the
    access and refresh tokens and the account DID.
    """

    def __init__(self, service_url: str, identifier: Optional[str] = None,
                 password: Optional[str] = None, timeout: float = 10.0,
                 http: Optional[requests.Session] = None):
        self.service_url = service_url.rstrip('/')
        self.identifier = identifier
        self.password = password
        self.timeout = timeout
        self.http = http or requests.Session()
        self.session: Optional[Dict[str, Any]] = None

    @property
    def did(self) -> Optional[str]:
        return self.session.get('did') if self.session else None

    def _url(self, nsid: str) -> str:
        return f"{self.service_url}/xrpc/{nsid}"

    def _call(self, method: str, nsid: str, token: Optional[str] = None,
              params: Optional[Dict[str, Any]] = None,
              body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {}
        if token:
            headers['Authorization'] = f"Bearer {token}"

        try:
            response = self.http.request(
                method, self._url(nsid), params=params, json=body,
                headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise AtprotoError(f"{nsid} request failed: {e}")

        if response.ok:
            if not response.content:
                return {}
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if not isinstance(payload, dict):
                raise AtprotoError(f"{nsid} returned a malformed response", response.status_code)
            return payload

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        error = payload.get('error')
        message = payload.get('message') or f"{nsid} failed with HTTP {response.status_code}"

        if error == 'ExpiredToken':
            raise ExpiredToken(message, response.status_code, error)
        if response.status_code == 401:
            raise AuthenticationRequired(message, response.status_code, error)
        raise AtprotoError(message, response.status_code, error)

    def create_session_for(self, identifier: str, password: str) -> Dict[str, Any]:
        """Authenticate an arbitrary account (handle or email plus app password)."""
        return self._call('POST', 'com.atproto.server.createSession',
                          body={'identifier': identifier, 'password': password})

    def login(self) -> Dict[str, Any]:
        """Open a session for the configured service account."""
        if not self.identifier or not self.password:
            raise AuthenticationRequired("Repository credentials are not configured")
        self.session = self.create_session_for(self.identifier, self.password)
        return self.session

    def refresh(self) -> Dict[str, Any]:
        if not self.session or not self.session.get('refreshJwt'):
            raise AuthenticationRequired("No session to refresh")
        refreshed = self._call('POST', 'com.atproto.server.refreshSession',
                               token=self.session['refreshJwt'])
        self.session = {**self.session, **refreshed}
        return self.session

    def _access_token(self) -> str:
        if not self.session:
            self.login()
        return self.session['accessJwt']

    @retry_on_expired_session
    def create_record(self, collection: str, rkey: str, record: Dict[str, Any]) -> Dict[str, Any]:
        token = self._access_token()
        return self._call('POST', 'com.atproto.repo.createRecord', token=token, body={
            'repo': self.did,
            'collection': collection,
            'rkey': rkey,
            'record': {'$type': collection, **record}
        })

    @retry_on_expired_session
    def get_record(self, collection: str, rkey: str) -> Optional[Dict[str, Any]]:
        """Fetch a record by key; None when the repository has no such record."""
        token = self._access_token()
        try:
            return self._call('GET', 'com.atproto.repo.getRecord', token=token, params={
                'repo': self.did,
                'collection': collection,
                'rkey': rkey
            })
        except (ExpiredToken, AuthenticationRequired):
            raise
        except AtprotoError as e:
            if e.error == 'RecordNotFound' or e.status == 404:
                return None
            raise
