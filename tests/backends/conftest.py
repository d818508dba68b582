"""Backend test fixtures -- parameterized for conformance testing."""

from __future__ import annotations

import socket
import tempfile
import uuid
from typing import TYPE_CHECKING

import pytest

from share_store.backends._dropbox import DropboxClient
from share_store.backends._local import LocalClient

from fakes import FakeDropbox

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from share_store._client import RemoteClient

REGION = "us-east-1"


def _s3_available() -> bool:
    try:
        import boto3  # noqa: F401
        import moto  # noqa: F401
        import s3fs  # noqa: F401

        return True
    except ImportError:
        return False


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("", 0))
        return s.getsockname()[1]


@pytest.fixture(scope="session")
def moto_server() -> Iterator[str | None]:
    """Start a moto HTTP server for the test session.

    Uses server mode instead of mock_aws() to avoid Python 3.13
    PEP 667 f_locals incompatibility with s3fs/aiobotocore.
    """
    if not _s3_available():
        yield None
        return
    from moto.moto_server.threaded_moto_server import ThreadedMotoServer

    port = _free_port()
    server = ThreadedMotoServer(port=port, verbose=False)
    server.start()
    yield f"http://127.0.0.1:{port}"
    server.stop()


@pytest.fixture()
def s3_bucket(moto_server: str | None) -> str:
    """Create a fresh bucket on the moto server and return its name."""
    if moto_server is None:
        pytest.skip("moto/s3fs not installed")
    import boto3

    bucket = f"share-{uuid.uuid4().hex[:8]}"
    boto3.client(
        "s3",
        endpoint_url=moto_server,
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        region_name=REGION,
    ).create_bucket(Bucket=bucket)
    return bucket


_s3_param = pytest.param(
    "s3",
    marks=pytest.mark.skipif(not _s3_available(), reason="moto/s3fs not installed"),
)


@pytest.fixture(params=["local", "dropbox", _s3_param])
def client_factory(request: pytest.FixtureRequest) -> Iterator[Callable[[], RemoteClient]]:
    """Builds fresh, unauthenticated clients that all talk to the same remote.

    Add new backends here.
    """
    if request.param == "local":
        with tempfile.TemporaryDirectory() as tmp:
            yield lambda: LocalClient(tmp, account_id=3, display_name="Carol")
    elif request.param == "dropbox":
        fake = FakeDropbox()

        def make_dropbox() -> RemoteClient:
            client = DropboxClient(session=fake)
            client.set_app_credentials("k", "s")
            return client

        yield make_dropbox
    elif request.param == "s3":
        from share_store.backends._s3 import S3Client

        moto_server = request.getfixturevalue("moto_server")
        bucket = request.getfixturevalue("s3_bucket")
        yield lambda: S3Client(bucket, endpoint_url=moto_server, region_name=REGION)
    else:
        pytest.skip(f"Unknown backend: {request.param}")


_AUTH_CODES = {"local": "let-me-in", "dropbox": "good-code", "s3": "testing:testing"}


@pytest.fixture()
def client(client_factory: Callable[[], RemoteClient]) -> Iterator[RemoteClient]:
    """An authenticated client for each backend."""
    c = client_factory()
    c.exchange_auth_code(_AUTH_CODES[c.name])
    yield c
    c.close()
