from __future__ import annotations

import io

import pytest

from nsstore.infra.storage.client import StorageError
from nsstore.services.base import InvalidNameError, InvalidPayloadError, NotFoundError
from nsstore.services.eraser import PrefixEraser
from nsstore.services.metadata import MetadataStore
from nsstore.services.namespaces import NamespaceManager
from nsstore.services.objects import ObjectGateway, read_all
from tests.fakes import FAKE_CREDENTIALS

pytestmark = pytest.mark.anyio


@pytest.fixture()
def gateway(storage, bucket, credentials):
    namespaces = NamespaceManager(
        MetadataStore(storage, bucket=bucket), PrefixEraser(storage, bucket=bucket)
    )
    return ObjectGateway(storage, namespaces, credentials, bucket=bucket)


class _AsyncReader:
    async def read(self):
        return b"async-read"


async def _chunks():
    yield b"ab"
    yield b"cd"


class TestReadAll:
    async def test_bytes_and_text(self):
        assert await read_all(b"raw") == b"raw"
        assert await read_all(bytearray(b"raw")) == b"raw"
        assert await read_all("héllo") == "héllo".encode("utf-8")

    async def test_file_like(self):
        assert await read_all(io.BytesIO(b"sync-read")) == b"sync-read"
        assert await read_all(io.StringIO("text-read")) == b"text-read"
        assert await read_all(_AsyncReader()) == b"async-read"

    async def test_iterables(self):
        assert await read_all([b"ab", b"cd"]) == b"abcd"
        assert await read_all(_chunks()) == b"abcd"

    async def test_missing_payload(self):
        with pytest.raises(InvalidPayloadError):
            await read_all(None)

    async def test_unsupported_payload(self):
        with pytest.raises(InvalidPayloadError, match="int"):
            await read_all(42)

    async def test_rejects_non_bytes_chunks(self):
        with pytest.raises(InvalidPayloadError, match="chunk type: int"):
            await read_all([104, 105])
        with pytest.raises(InvalidPayloadError, match="chunk type: int"):
            await read_all(iter([b"ok", 1]))

    async def test_text_chunks_are_encoded(self):
        assert await read_all(["ab", b"cd"]) == b"abcd"


class TestPutObject:
    async def test_inline_upload_stores_under_namespace(self, gateway, storage, bucket):
        result = await gateway.put_object("foo", "/fizz//bar.jpg", b"image")

        assert result is None
        assert storage.objects["foo/fizz/bar.jpg"] == b"image"
        assert storage.calls_to("put_object")[-1]["bucket"] == bucket

    async def test_signed_url_skips_transfer(self, gateway, storage, credentials):
        url = await gateway.put_object("foo", "bar.jpg", use_signed_url=True)

        assert "foo/bar.jpg" in url
        assert "method=PUT" in url
        assert "expires=300" in url
        assert storage.calls_to("put_object") == []
        assert credentials.calls == 1
        assert storage.calls_to("sign_url")[0]["credentials"] == FAKE_CREDENTIALS

    async def test_unknown_namespace(self, gateway, storage):
        with pytest.raises(NotFoundError):
            await gateway.put_object("nope", "bar.jpg", b"x")
        assert storage.calls_to("put_object") == []

    async def test_traversal_in_key(self, gateway, storage):
        with pytest.raises(InvalidNameError):
            await gateway.put_object("foo", "../meta.json", b"x")
        assert storage.calls == []

    @pytest.mark.parametrize("namespace", ["foo/", "/foo", "foo/fizz"])
    async def test_namespace_with_separator(self, gateway, storage, namespace):
        with pytest.raises(InvalidNameError):
            await gateway.put_object(namespace, "bar.jpg", b"x")
        assert storage.calls == []

    async def test_inline_requires_payload(self, gateway):
        with pytest.raises(InvalidPayloadError):
            await gateway.put_object("foo", "bar.jpg")


class TestGetObject:
    async def test_inline_returns_bytes(self, gateway, storage):
        storage.objects["foo/bar.jpg"] = b"image"

        assert await gateway.get_object("foo", "bar.jpg") == b"image"

    async def test_missing_object(self, gateway):
        with pytest.raises(NotFoundError) as excinfo:
            await gateway.get_object("foo", "absent.jpg")
        assert excinfo.value.message == "object not found"
        assert excinfo.value.status == 404

    async def test_other_errors_propagate(self, gateway, storage):
        storage.key_failures["foo/bar.jpg"] = StorageError(
            "Failed to get object: AccessDenied", code="AccessDenied", status=403
        )

        with pytest.raises(StorageError, match="AccessDenied"):
            await gateway.get_object("foo", "bar.jpg")

    async def test_signed_url_skips_transfer(self, gateway, storage):
        url = await gateway.get_object("foo", "absent.jpg", use_signed_url=True)

        assert "method=GET" in url
        assert "expires=3600" in url
        assert [call["object_key"] for call in storage.calls_to("get_object")] == [
            "meta.json"
        ]

    async def test_custom_expirations(self, storage, bucket, credentials):
        namespaces = NamespaceManager(
            MetadataStore(storage, bucket=bucket), PrefixEraser(storage, bucket=bucket)
        )
        gateway = ObjectGateway(
            storage,
            namespaces,
            credentials,
            bucket=bucket,
            put_url_expires_in=10,
            get_url_expires_in=20,
        )

        assert "expires=10" in await gateway.put_object("foo", "a", use_signed_url=True)
        assert "expires=20" in await gateway.get_object("foo", "a", use_signed_url=True)


class TestRemoveAndList:
    async def test_remove_object(self, gateway, storage):
        storage.objects["foo/bar.jpg"] = b"image"

        await gateway.remove_object("foo", "bar.jpg")

        assert "foo/bar.jpg" not in storage.objects

    async def test_list_returns_first_page_of_raw_keys(self, gateway, storage):
        storage.page_size = 2
        for name in ("a.jpg", "b.jpg", "c.jpg"):
            storage.objects[f"foo/fizz/{name}"] = b"x"
        storage.objects["foo/other.jpg"] = b"x"

        keys = await gateway.list_objects("foo", "fizz/")

        assert keys == ["foo/fizz/a.jpg", "foo/fizz/b.jpg"]
        assert storage.calls_to("list_objects")[0]["prefix"] == "foo/fizz/"

    async def test_list_whole_namespace(self, gateway, storage):
        storage.objects["foo/a.jpg"] = b"x"
        storage.objects["foobar/b.jpg"] = b"x"

        assert await gateway.list_objects("foo") == ["foo/a.jpg"]
