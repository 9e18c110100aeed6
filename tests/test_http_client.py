"""
Tests for the signed Layer1 HTTP client
"""

import base64
import hashlib
import json
from unittest.mock import Mock

import pytest
import requests
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from layer1_digital.config import Layer1Config
from layer1_digital.exceptions import ApiError, KeyFormatError, NetworkError, SigningError, ValidationError
from layer1_digital.http_client import AuthenticatedClient, create_client, serialize_body


def make_response(status_code=200, content=b'{}', reason='OK', url='https://api.sandbox.layer1.com/'):
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response.reason = reason
    response.url = url
    response.encoding = 'utf-8'
    return response


class RecordingSession(requests.Session):
    """Session that records prepared requests instead of sending them"""

    def __init__(self, response=None, error=None):
        super().__init__()
        self.sent = []
        self.send_kwargs = []
        self.response = response if response is not None else make_response()
        self.error = error

    def send(self, request, **kwargs):
        self.sent.append(request)
        self.send_kwargs.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def signature_base_from(prepared):
    """Rebuild the signature base a verifier would derive from the wire request"""
    lines = [
        f'"@method": {prepared.method}',
        f'"@target-uri": {prepared.url}',
    ]
    if 'Content-Digest' in prepared.headers:
        lines.append(f'"content-digest": {prepared.headers["Content-Digest"]}')
    lines.append(f'"@signature-params": {prepared.headers["Signature-Input"][len("sig="):]}')
    return '\n'.join(lines)


def verify_prepared(prepared, public_key):
    signature = base64.b64decode(prepared.headers['Signature'][len('sig=:'):-1])
    public_key.verify(
        signature,
        signature_base_from(prepared).encode('utf-8'),
        padding.PKCS1v15(),
        hashes.SHA256()
    )


class TestSerializeBody:
    """Test request body serialization"""

    def test_compact_json(self):
        body = {'assetPoolId': 'p1', 'network': 'ETHEREUM', 'reference': 'r1'}
        assert serialize_body(body) == '{"assetPoolId":"p1","network":"ETHEREUM","reference":"r1"}'

    def test_no_body(self):
        assert serialize_body(None) == ''

    def test_non_ascii_kept(self):
        assert serialize_body({'reference': 'café'}) == '{"reference":"café"}'

    def test_lone_surrogate_rejected(self):
        """Text that cannot be sent as UTF-8 is a validation failure"""
        body = json.loads('{"reference":"r\\ud800"}')

        with pytest.raises(ValidationError) as exc_info:
            serialize_body(body)
        assert exc_info.value.error_code == "INVALID_PARAMETER"


class TestBuildUrl:
    """Test URL assembly"""

    def setup_method(self):
        self.config = Layer1Config(asset_pool_id='p1', client_id='client-123', private_key='unused')
        self.client = AuthenticatedClient(self.config, signer=Mock(), session=RecordingSession())

    def test_endpoint_only(self):
        assert self.client.build_url('/digital/v1/addresses') == \
            'https://api.sandbox.layer1.com/digital/v1/addresses'

    def test_none_values_are_skipped(self):
        url = self.client.build_url('/digital/v1/transactions', {'assetPoolId': 'p1', 'q': None})
        assert url == 'https://api.sandbox.layer1.com/digital/v1/transactions?assetPoolId=p1'

    def test_values_are_encoded(self):
        url = self.client.build_url('/digital/v1/transactions', {'assetPoolId': 'p1', 'q': 'hash:0xabc'})
        assert url == 'https://api.sandbox.layer1.com/digital/v1/transactions?assetPoolId=p1&q=hash%3A0xabc'

    def test_booleans_lowercase(self):
        url = self.client.build_url('/x', {'flag': True, 'other': False})
        assert url.endswith('/x?flag=true&other=false')

    def test_all_none_leaves_no_query(self):
        assert self.client.build_url('/x', {'q': None}) == 'https://api.sandbox.layer1.com/x'

    def test_lone_surrogate_in_query_rejected(self):
        with pytest.raises(ValidationError):
            self.client.build_url('/x', {'q': 'hash:\ud800'})


class TestAuthenticatedClient:
    """Test signed request dispatch and error mapping"""

    def test_post_is_signed_over_exact_wire_bytes(self, config, signer, rsa_private_key):
        """Signed URL and digest match what is dispatched"""
        session = RecordingSession(make_response(201, b'{"id":"addr-1","address":"0xabc"}', 'Created'))
        client = AuthenticatedClient(config, signer=signer, session=session)

        result = client.request(
            '/digital/v1/addresses',
            'POST',
            {'assetPoolId': 'p1', 'network': 'ETHEREUM', 'reference': 'r1'}
        )

        assert result == {'id': 'addr-1', 'address': '0xabc'}
        assert len(session.sent) == 1
        prepared = session.sent[0]

        assert prepared.method == 'POST'
        assert prepared.url == 'https://api.sandbox.layer1.com/digital/v1/addresses'
        assert prepared.body == b'{"assetPoolId":"p1","network":"ETHEREUM","reference":"r1"}'
        assert prepared.headers['Content-Type'] == 'application/json'
        assert prepared.headers['Accept'] == 'application/json'

        expected_digest = base64.b64encode(hashlib.sha256(prepared.body).digest()).decode('ascii')
        assert prepared.headers['Content-Digest'] == f'sha-256=:{expected_digest}:'
        assert prepared.headers['Signature-Input'] == (
            'sig=("@method" "@target-uri" "content-digest");created=1700000000;'
            'keyid="client-123";alg="rsa-v1_5-sha256"'
        )

        verify_prepared(prepared, rsa_private_key.public_key())

    def test_get_with_query_has_no_digest(self, config, signer, rsa_private_key):
        session = RecordingSession(make_response(200, b'{"content":[],"totalElements":0}'))
        client = AuthenticatedClient(config, signer=signer, session=session)

        client.request('/digital/v1/transactions', 'get', query_params={'assetPoolId': 'p1', 'q': None})

        prepared = session.sent[0]
        assert prepared.method == 'GET'
        assert prepared.url == 'https://api.sandbox.layer1.com/digital/v1/transactions?assetPoolId=p1'
        assert prepared.body is None
        assert 'Content-Digest' not in prepared.headers
        assert '"content-digest"' not in prepared.headers['Signature-Input']

        verify_prepared(prepared, rsa_private_key.public_key())

    def test_tampered_url_fails_verification(self, config, signer, rsa_private_key):
        session = RecordingSession()
        client = AuthenticatedClient(config, signer=signer, session=session)
        client.request('/digital/v1/asset-pools/p1')

        prepared = session.sent[0]
        prepared.url = prepared.url.replace('/p1', '/p2')

        with pytest.raises(InvalidSignature):
            verify_prepared(prepared, rsa_private_key.public_key())

    def test_timeout_and_tls_settings_passed(self, private_key_pem, signer):
        config = Layer1Config(
            asset_pool_id='p1',
            client_id='client-123',
            private_key=private_key_pem,
            timeout=5.0,
            verify_ssl=False
        )
        session = RecordingSession()
        AuthenticatedClient(config, signer=signer, session=session).request('/x')

        assert session.send_kwargs[0]['timeout'] == 5.0
        assert session.send_kwargs[0]['verify'] is False

    def test_api_error(self, config, signer):
        """Non-2xx responses raise ApiError with status and raw body"""
        session = RecordingSession(make_response(422, b'{"error":"bad reference"}', 'Unprocessable Entity'))
        client = AuthenticatedClient(config, signer=signer, session=session)

        with pytest.raises(ApiError) as exc_info:
            client.request('/digital/v1/addresses', 'POST', {'network': 'ETHEREUM'})

        error = exc_info.value
        assert error.http_status == 422
        assert error.body == '{"error":"bad reference"}'
        assert str(error) == 'API Error (422): {"error":"bad reference"}'

    def test_connection_error(self, config, signer):
        session = RecordingSession(error=requests.exceptions.ConnectionError("connection refused"))
        client = AuthenticatedClient(config, signer=signer, session=session)

        with pytest.raises(NetworkError) as exc_info:
            client.request('/x')

        assert "connection refused" in str(exc_info.value)
        assert exc_info.value.error_code == "NETWORK_ERROR"

    def test_timeout_error(self, config, signer):
        session = RecordingSession(error=requests.exceptions.ReadTimeout("read timed out"))
        client = AuthenticatedClient(config, signer=signer, session=session)

        with pytest.raises(NetworkError) as exc_info:
            client.request('/x')

        assert exc_info.value.error_code == "TIMEOUT"

    def test_method_with_whitespace_rejected(self, config, signer):
        """The dispatched method must be exactly the one that is signed"""
        session = RecordingSession()
        client = AuthenticatedClient(config, signer=signer, session=session)

        for method in (' get', 'GET\n', 'ÉGET'):
            with pytest.raises(SigningError):
                client.request('/x', method)

        assert session.sent == []

    def test_lowercase_method_sent_uppercase(self, config, signer, rsa_private_key):
        session = RecordingSession()
        AuthenticatedClient(config, signer=signer, session=session).request('/x', 'post', {'a': 1})

        prepared = session.sent[0]
        assert prepared.method == 'POST'
        verify_prepared(prepared, rsa_private_key.public_key())

    def test_unencodable_body_sends_nothing(self, config, signer):
        session = RecordingSession()
        client = AuthenticatedClient(config, signer=signer, session=session)

        with pytest.raises(ValidationError):
            client.request('/digital/v1/addresses', 'POST', json.loads('{"reference":"r\\ud800"}'))

        assert session.sent == []

    def test_signing_failure_sends_nothing(self):
        """A key that cannot be parsed aborts the request before dispatch"""
        config = Layer1Config(asset_pool_id='p1', client_id='client-123', private_key='not-a-key')
        session = RecordingSession()
        client = AuthenticatedClient(config, session=session)

        with pytest.raises(KeyFormatError):
            client.request('/digital/v1/addresses', 'POST', {'network': 'ETHEREUM'})

        assert session.sent == []

    def test_empty_response(self, config, signer):
        session = RecordingSession(make_response(204, b'', 'No Content'))
        client = AuthenticatedClient(config, signer=signer, session=session)

        assert client.request('/x', 'DELETE') is None

    def test_invalid_json_response(self, config, signer):
        session = RecordingSession(make_response(200, b'<html>gateway</html>'))
        client = AuthenticatedClient(config, signer=signer, session=session)

        with pytest.raises(ApiError) as exc_info:
            client.request('/x')

        assert exc_info.value.error_code == "INVALID_JSON"
        assert exc_info.value.http_status == 200

    def test_fresh_signature_per_request(self, config, private_key_pem):
        """Each request gets its own creation time"""
        clock = iter([1700000000, 1700000005])
        client = AuthenticatedClient(config, session=RecordingSession())
        client.signer._timestamp_generator = lambda: next(clock)

        client.request('/x')
        client.request('/x')

        first, second = client.session.sent
        assert 'created=1700000000' in first.headers['Signature-Input']
        assert 'created=1700000005' in second.headers['Signature-Input']

    def test_context_manager_closes_session(self, config, signer):
        session = Mock(spec=requests.Session)

        with AuthenticatedClient(config, signer=signer, session=session):
            pass

        session.close.assert_called_once()

    def test_create_client(self, config):
        client = create_client(config)

        assert isinstance(client, AuthenticatedClient)
        assert client.signer.client_id == 'client-123'
        assert isinstance(client.session, requests.Session)
        client.close()

    def test_response_body_round_trip(self, config, signer):
        payload = {'id': 'p1', 'balances': [{'asset': 'ETH', 'amount': '1.5'}]}
        session = RecordingSession(make_response(200, json.dumps(payload).encode('utf-8')))

        assert AuthenticatedClient(config, signer=signer, session=session).request('/x') == payload
