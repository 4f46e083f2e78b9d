"""
Integration tests for requests signing

These tests sign requests through the ``requests`` auth hook and check that
the server-side verifier accepts them. No network traffic is made: a
recording transport adapter captures what would have been sent.
"""

import pytest
import requests
from requests.adapters import HTTPAdapter
from requests.models import PreparedRequest, Response
from requests.structures import CaseInsensitiveDict

from hmacsign import (
    Credential,
    HmacAuth,
    HmacConfig,
    StaticCredentialStore,
    VerificationReason,
    VerificationResult,
    Verifier,
    create_signing_session,
    parse_authorization,
)
from hmacsign.exceptions import SigningError
from hmacsign.signing import prepared_request_to_raw


class RecordingAdapter(HTTPAdapter):
    """Transport adapter that records requests instead of sending them"""

    def __init__(self):
        super().__init__()
        self.sent = []

    def send(self, request, **kwargs):
        self.sent.append(request)
        response = Response()
        response.status_code = 200
        response._content = b'{}'
        response.request = request
        response.url = request.url
        return response


@pytest.fixture
def credential():
    return Credential('client-1', 'abcd1234')


@pytest.fixture
def store():
    return StaticCredentialStore({'client-1': 'abcd1234'})


class TestPreparedRequestToRaw:
    """Test conversion of prepared requests"""

    def test_basic_fields(self):
        """Test method, host, port, path, query and body extraction"""
        prepared = requests.Request('POST', 'http://API.example.com:8080/orders?b=2&a=1', data=b'x').prepare()
        raw = prepared_request_to_raw(prepared)
        assert raw['method'] == 'POST'
        assert raw['host'] == 'api.example.com'
        assert raw['port'] == 8080
        assert raw['path'] == '/orders'
        assert raw['query'] == 'b=2&a=1'
        assert raw['body'] == b'x'

    @pytest.mark.parametrize('url', ['http://example.com:80/', 'https://example.com:443/', 'https://example.com/'])
    def test_default_port_dropped(self, url):
        """Test that the scheme's default port is omitted"""
        raw = prepared_request_to_raw(requests.Request('GET', url).prepare())
        assert raw['host'] == 'example.com'
        assert raw['port'] is None

    def test_userinfo_removed(self):
        """Test that credentials in the URL are not part of the host"""
        raw = prepared_request_to_raw(requests.Request('GET', 'http://user:pw@example.com:81/').prepare())
        assert raw['host'] == 'example.com'
        assert raw['port'] == 81

    def test_invalid_port(self):
        """Test that an out-of-range port is a signing error"""
        prepared = PreparedRequest()
        prepared.method = 'GET'
        prepared.url = 'http://example.com:99999/'
        prepared.headers = CaseInsensitiveDict()
        prepared.body = None
        with pytest.raises(SigningError):
            prepared_request_to_raw(prepared)


class TestHmacAuth:
    """Test the requests auth handler"""

    def test_adds_date_and_authorization(self, credential):
        """Test headers added by the handler"""
        prepared = requests.Request('GET', 'https://api.example.com/orders', auth=HmacAuth(credential)).prepare()
        assert 'Date' in prepared.headers
        key_id, signature = parse_authorization(prepared.headers['Authorization'])
        assert key_id == 'client-1'
        assert len(signature) == 64

    def test_keeps_existing_date(self, credential):
        """Test that a caller-supplied Date header is signed as is"""
        date = 'Mon, 30 Jul 2012 14:40:30 GMT'
        prepared = requests.Request('GET', 'https://api.example.com/', headers={'Date': date},
                                    auth=HmacAuth(credential)).prepare()
        assert prepared.headers['Date'] == date

    def test_without_date(self, credential):
        """Test that add_date=False leaves the Date header out"""
        prepared = requests.Request('GET', 'https://api.example.com/',
                                    auth=HmacAuth(credential, add_date=False)).prepare()
        assert 'Date' not in prepared.headers
        assert 'Authorization' in prepared.headers

    def test_signed_request_verifies(self, credential, store):
        """Test that the verifier accepts what the handler signed"""
        prepared = requests.Request(
            'POST',
            'http://localhost:8080/orders?b=2&a=1',
            json={'qty': 3},
            auth=HmacAuth(credential),
        ).prepare()
        result = Verifier().authenticate(prepared_request_to_raw(prepared), store)
        assert result == VerificationResult(True, VerificationReason.OK, 'client-1')

    def test_tampered_body_is_rejected(self, credential, store):
        """Test that changing the body after signing is detected"""
        prepared = requests.Request('POST', 'http://localhost/orders', json={'qty': 3},
                                    auth=HmacAuth(credential)).prepare()
        prepared.body = b'{"qty": 300}'
        result = Verifier().authenticate(prepared_request_to_raw(prepared), store)
        assert result.reason == VerificationReason.MISMATCH

    def test_config_is_used(self, credential, store):
        """Test a non-default configuration end to end"""
        config = HmacConfig(algorithm='sha512', encoding='base64', scheme='APIAuth')
        prepared = requests.Request('PUT', 'https://api.example.com/x', data='body',
                                    auth=HmacAuth(credential, config)).prepare()
        assert prepared.headers['Authorization'].startswith('APIAuth client-1:')
        assert Verifier(config).authenticate(prepared_request_to_raw(prepared), store).accepted


class TestSigningSession:
    """Test session helpers"""

    def test_create_signing_session(self, credential):
        """Test that a new session gets the auth handler"""
        session = create_signing_session(credential)
        assert isinstance(session, requests.Session)
        assert isinstance(session.auth, HmacAuth)
        assert session.auth.credential is credential

    def test_existing_session(self, credential):
        """Test configuring a caller-provided session"""
        session = requests.Session()
        assert create_signing_session(credential, session=session) is session
        assert isinstance(session.auth, HmacAuth)

    def test_session_requests_verify(self, credential, store):
        """Test that requests sent through the session verify on the server side"""
        session = create_signing_session(credential)
        adapter = RecordingAdapter()
        session.mount('http://', adapter)

        response = session.post('http://localhost:9001/orders', params={'page': 2}, json={'qty': 3})

        assert response.status_code == 200
        assert len(adapter.sent) == 1
        sent = adapter.sent[0]
        assert 'User-Agent' in sent.headers
        result = Verifier().authenticate(prepared_request_to_raw(sent), store)
        assert result.accepted
