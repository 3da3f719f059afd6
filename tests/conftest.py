"""
Pytest configuration and shared fixtures for cloudinary client tests.
"""

import os
from pathlib import Path
from typing import Callable, List

import httpx
import pytest

from cloudinary_client import CloudinaryClient
from cloudinary_client.config import Config, reset_config


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test credentials"""
    project_root = Path(__file__).parent.parent
    os.environ['PYTHONPATH'] = str(project_root)

    os.environ.pop('CLOUDINARY_URL', None)
    os.environ['CLOUDINARY_CLOUD_NAME'] = 'test-cloud'
    os.environ['CLOUDINARY_API_KEY'] = '123456789012345'
    os.environ['CLOUDINARY_API_SECRET'] = 'test_api_secret'

    yield


@pytest.fixture(autouse=True)
def clean_global_config():
    """Every test starts without a cached global configuration"""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Explicit configuration independent of the environment"""
    return Config(cloud_name='demo', api_key='987654321098765', api_secret='abcd')


class RecordingHandler:
    """MockTransport handler that records requests and replies with canned JSON"""

    def __init__(self, status_code: int = 200, payload=None, headers=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {}
        self.headers = headers or {}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.payload, (dict, list)):
            return httpx.Response(self.status_code, json=self.payload, headers=self.headers)
        return httpx.Response(self.status_code, text=self.payload, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_client(config) -> Callable[..., tuple]:
    """Build a CloudinaryClient whose HTTP traffic goes to a RecordingHandler"""
    def factory(status_code: int = 200, payload=None, headers=None, client_config=None):
        handler = RecordingHandler(status_code, payload, headers)
        client = CloudinaryClient(config=client_config or config, transport=httpx.MockTransport(handler))
        return client, handler
    return factory


@pytest.fixture
def sample_upload_response():
    """Upload API response as documented"""
    return {
        'public_id': 'pets/cat',
        'version': 1312461204,
        'signature': 'abcdefghijklmnopqrstuvwxyz12345',
        'width': 864,
        'height': 576,
        'format': 'jpg',
        'resource_type': 'image',
        'created_at': '2017-08-11T12:24:32Z',
        'tags': ['animal', 'cat'],
        'bytes': 120253,
        'type': 'upload',
        'etag': '3b2e4e6b8e2b4b6c',
        'placeholder': False,
        'url': 'http://res.cloudinary.com/demo/image/upload/v1312461204/pets/cat.jpg',
        'secure_url': 'https://res.cloudinary.com/demo/image/upload/v1312461204/pets/cat.jpg',
        'access_mode': 'public',
        'original_filename': 'cat',
        'asset_id': 'b5e6d2b39ba3e0869d67141ba7dba6cf',
    }


@pytest.fixture
def sample_delete_response():
    """Admin API delete response"""
    return {
        'deleted': {'image1': 'deleted', 'image2': 'not_found'},
        'deleted_counts': {
            'image1': {'original': 1, 'derived': 2},
            'image2': {'original': 0, 'derived': 0},
        },
        'partial': False,
    }


@pytest.fixture
def image_file(tmp_path) -> Path:
    """Small local file to upload"""
    path = tmp_path / 'cat.jpg'
    path.write_bytes(b'\xff\xd8\xff\xe0fake-jpeg-bytes')
    return path


def _multipart_fields(request: httpx.Request) -> dict:
    content_type = request.headers['content-type']
    boundary = content_type.split('boundary=')[1].encode()
    fields = {}
    for part in request.content.split(b'--' + boundary):
        if b'\r\n\r\n' not in part:
            continue
        head, body = part.split(b'\r\n\r\n', 1)
        head = head.decode()
        if 'name="' not in head or 'filename="' in head:
            continue
        name = head.split('name="')[1].split('"')[0]
        fields[name] = body.rstrip(b'\r\n').decode()
    return fields


@pytest.fixture
def form_fields():
    """Parse the plain (non-file) fields of a multipart request body"""
    return _multipart_fields


@pytest.fixture
def recording_handler():
    """The RecordingHandler class, for tests that wire their own transport"""
    return RecordingHandler
