"""
Test suite for HMAC request signing

This module tests canonical string construction, the signer, and the
Authorization header scheme.
"""

import pytest

from hmacsign.config import HmacConfig
from hmacsign.crypto import DigestEngine
from hmacsign.exceptions import SigningError, SigningErrorCodes
from hmacsign.signing import (
    # Types
    Credential,
    Signature,
    # Normalization
    normalize,
    # Canonical string
    build_canonical_string,
    canonical_query_string,
    select_signed_headers,
    # Signer
    Signer,
    create_signer,
    sign_request,
    # Authorization header
    format_authorization,
    parse_authorization,
)

BODY_HASH = 'e9cee71ab932fde863338d08be4de9dfe39ea049bdafb342ce659ec5450b69ae'
EMPTY_HASH = 'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'


def sample_request(**overrides):
    """Build a raw request description"""
    raw = {
        'method': 'post',
        'host': 'localhost',
        'port': '8080',
        'path': '/orders',
        'query': 'z=1&a=x y',
        'headers': {
            'Content-Type': ' application/json ',
            'Date': 'Mon, 30 Jul 2012 14:40:30 GMT',
            'Authorization': 'HMAC someone:something',
        },
        'body': 'abcd1234',
    }
    raw.update(overrides)
    return raw


class TestCanonicalString:
    """Test canonical string construction"""

    def setup_method(self):
        """Set up test fixtures"""
        self.engine = DigestEngine()

    def test_layout(self):
        """Test the full canonical string for a typical request"""
        canonical = build_canonical_string(normalize(sample_request()), self.engine)
        assert canonical == '\n'.join([
            'POST',
            '/orders',
            'a=x%20y&z=1',
            'content-type: application/json ',
            'date:Mon, 30 Jul 2012 14:40:30 GMT',
            'host:localhost:8080',
            'content-type;date;host',
            BODY_HASH,
        ])

    def test_empty_request(self):
        """Test the canonical string of a request with no fields"""
        canonical = build_canonical_string(normalize({'headers': {}}), self.engine)
        assert canonical == '\n'.join(['', '/', '', '', EMPTY_HASH])

    def test_authorization_never_signed(self):
        """Test that the Authorization header is excluded"""
        headers = select_signed_headers(normalize(sample_request()))
        assert 'authorization' not in dict(headers)

    def test_explicit_signed_headers(self):
        """Test that only configured headers are signed"""
        headers = select_signed_headers(normalize(sample_request()), ('host', 'DATE', 'x-missing'))
        assert [name for name, _ in headers] == ['date', 'host']

    def test_header_order_and_case_do_not_matter(self):
        """Test that equivalent requests produce the same canonical string"""
        first = sample_request(headers={'X-B': '2', 'x-a': '1'})
        second = sample_request(headers={'x-a': '1', 'x-b': '2'})
        assert (build_canonical_string(normalize(first), self.engine)
                == build_canonical_string(normalize(second), self.engine))

    def test_canonical_query_string(self):
        """Test sorting and percent-encoding of query pairs"""
        assert canonical_query_string([('b', '2'), ('a', 'x/y'), ('a', '~ok')]) == 'a=x%2Fy&a=~ok&b=2'
        assert canonical_query_string([]) == ''


class TestSigner:
    """Test the HMAC signer"""

    def setup_method(self):
        """Set up test fixtures"""
        self.signer = Signer(HmacConfig())
        self.credential = Credential('client-1', 'abcd1234')

    def test_signature_is_hmac_of_canonical_string(self):
        """Test that the signature is the HMAC of the string to sign"""
        request = normalize(sample_request())
        signature = self.signer.sign(request, self.credential)
        expected = DigestEngine().hmac(self.signer.string_to_sign(request), b'abcd1234')
        assert signature == Signature(expected, 'hex')
        assert str(signature) == expected

    def test_deterministic(self):
        """Test that signing the same request twice gives the same signature"""
        request = normalize(sample_request())
        assert self.signer.sign(request, self.credential) == self.signer.sign(request, self.credential)

    def test_different_secrets_differ(self):
        """Test that different secrets give different signatures"""
        request = normalize(sample_request())
        other = Credential('client-1', 'another secret')
        assert self.signer.sign(request, self.credential) != self.signer.sign(request, other)

    def test_changes_are_detected(self):
        """Test that altering a signed part changes the signature"""
        original = self.signer.sign_request(sample_request(), self.credential)
        assert self.signer.sign_request(sample_request(body='abcd1235'), self.credential) != original
        assert self.signer.sign_request(sample_request(method='PUT'), self.credential) != original
        assert self.signer.sign_request(sample_request(query='z=2&a=x y'), self.credential) != original

    def test_authorization_header_does_not_affect_signature(self):
        """Test that an Authorization header can be added after signing"""
        raw = sample_request()
        signature = self.signer.sign_request(raw, self.credential)
        raw['headers'] = dict(raw['headers'], Authorization='HMAC client-1:' + signature.value)
        assert self.signer.sign_request(raw, self.credential) == signature

    def test_encoding_follows_config(self):
        """Test base64 signatures"""
        signer = Signer(HmacConfig(encoding='base64'))
        signature = signer.sign_request(sample_request(), self.credential)
        assert signature.encoding == 'base64'
        assert signer.engine.decode(signature.value) == DigestEngine().decode(
            self.signer.sign_request(sample_request(), self.credential).value
        )

    def test_signed_headers_config(self):
        """Test that unsigned headers may change freely"""
        signer = Signer(HmacConfig(signed_headers=['date', 'host']))
        original = signer.sign_request(sample_request(), self.credential)
        changed = sample_request(headers={
            'Content-Type': 'text/plain',
            'Date': 'Mon, 30 Jul 2012 14:40:30 GMT',
        })
        assert signer.sign_request(changed, self.credential) == original

    def test_rejects_raw_request(self):
        """Test that sign() requires a normalized request"""
        with pytest.raises(SigningError) as exc_info:
            self.signer.sign(sample_request(), self.credential)
        assert exc_info.value.error_code == SigningErrorCodes.NOT_NORMALIZED

    def test_rejects_bad_credential(self):
        """Test that sign() requires a Credential"""
        with pytest.raises(SigningError) as exc_info:
            self.signer.sign(normalize(sample_request()), 'abcd1234')
        assert exc_info.value.error_code == SigningErrorCodes.INVALID_CREDENTIAL

    def test_rejects_unnormalizable_request(self):
        """Test that sign_request() reports requests it cannot normalize"""
        with pytest.raises(SigningError) as exc_info:
            self.signer.sign_request('GET / HTTP/1.1', self.credential)
        assert exc_info.value.error_code == SigningErrorCodes.INVALID_REQUEST

    def test_authorization_header(self):
        """Test Authorization header value"""
        value = self.signer.authorization_header(sample_request(), self.credential)
        signature = self.signer.sign_request(sample_request(), self.credential)
        assert value == f"HMAC client-1:{signature.value}"

    def test_module_helpers(self):
        """Test create_signer and sign_request helpers"""
        config = HmacConfig(algorithm='sha1')
        assert create_signer(config).config is config
        signature = sign_request(sample_request(), self.credential, config)
        assert len(signature.value) == 40


class TestCredential:
    """Test credential validation"""

    def test_text_secret_is_utf8(self):
        """Test that text secrets are stored as UTF-8 bytes"""
        assert Credential('k', 'clé').secret == 'clé'.encode('utf-8')
        assert Credential('k', bytearray(b'x')).secret == b'x'

    def test_secret_not_in_repr(self):
        """Test that the secret is not shown in repr"""
        assert 'hunter2' not in repr(Credential('k', 'hunter2'))

    @pytest.mark.parametrize('key_id, secret', [('', 's'), (None, 's'), (5, 's'), ('k', None), ('k', 42)])
    def test_invalid(self, key_id, secret):
        """Test invalid credentials"""
        with pytest.raises(SigningError):
            Credential(key_id, secret)


class TestAuthorizationScheme:
    """Test Authorization header formatting and parsing"""

    def test_format(self):
        """Test header formatting"""
        assert format_authorization('client-1', Signature('abc', 'hex')) == 'HMAC client-1:abc'
        assert format_authorization('client-1', 'abc', 'APIAuth') == 'APIAuth client-1:abc'

    @pytest.mark.parametrize('key_id', ['', 'a:b', 'a b'])
    def test_format_rejects_bad_key_id(self, key_id):
        """Test key IDs that cannot be parsed back"""
        with pytest.raises(SigningError):
            format_authorization(key_id, 'abc')

    def test_parse(self):
        """Test header parsing"""
        assert parse_authorization('HMAC client-1:abc') == ('client-1', 'abc')
        assert parse_authorization('  hmac   client-1:a+b/c=  ') == ('client-1', 'a+b/c=')
        assert parse_authorization('APIAuth k:s', 'APIAuth') == ('k', 's')

    @pytest.mark.parametrize('value', [
        None,
        '',
        'HMAC',
        'HMAC client-1',
        'HMAC :abc',
        'HMAC client-1:',
        'Bearer client-1:abc',
        'HMAC client 1:abc',
    ])
    def test_parse_malformed(self, value):
        """Test malformed header values"""
        assert parse_authorization(value) is None
