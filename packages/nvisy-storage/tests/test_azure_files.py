from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError

from nvisy_storage import ErrorKind, StorageError, collect_all
from nvisy_storage.providers.azure_files import AzureFilesParams, AzureFilesProvider
from nvisy_storage.tokens import ContinuationToken


class _FakePager:
    def __init__(self, segments: dict[str | None, Any], continuation_token: str | None) -> None:
        self._segments = segments
        self.continuation_token = continuation_token

    def __aiter__(self) -> _FakePager:
        return self

    async def __anext__(self) -> Any:
        items, next_marker = self._segments[self.continuation_token]
        self.continuation_token = next_marker

        async def segment():
            for item in items:
                yield item

        return segment()


class _FakeItemPaged:
    def __init__(self, segments: dict[str | None, Any]) -> None:
        self._segments = segments

    def by_page(self, continuation_token: str | None = None) -> _FakePager:
        return _FakePager(self._segments, continuation_token)


class _FakeStream:
    def __init__(self, data: bytes) -> None:
        self._data = data

    async def readall(self) -> bytes:
        return self._data


class _FakeFileClient:
    def __init__(self, share: _FakeShareClient, path: str) -> None:
        self._share = share
        self._path = path
        self.url = f"{share.url}/{path}"

    async def upload_file(self, data: bytes, **kwargs: Any) -> dict[str, Any]:
        self._share.files[self._path] = (data, kwargs["content_settings"].content_type)
        return {}

    async def download_file(self) -> _FakeStream:
        if self._path not in self._share.files:
            msg = "The specified resource does not exist."
            raise ResourceNotFoundError(msg)
        return _FakeStream(self._share.files[self._path][0])

    async def delete_file(self) -> None:
        if self._share.files.pop(self._path, None) is None:
            msg = "The specified resource does not exist."
            raise ResourceNotFoundError(msg)

    async def exists(self) -> bool:
        return self._path in self._share.files


class _FakeDirectoryClient:
    def __init__(self, share: _FakeShareClient, path: str) -> None:
        self._share = share
        self._path = path

    def list_directories_and_files(self, **kwargs: Any) -> _FakeItemPaged:
        self._share.list_calls.append((self._path, kwargs))
        return _FakeItemPaged(self._share.segments)

    def get_file_client(self, name: str) -> _FakeFileClient:
        path = f"{self._path}/{name}" if self._path else name
        return _FakeFileClient(self._share, path)


class _FakeShareClient:
    account_name = "devstore"
    share_name = "documents"
    url = "https://devstore.file.core.windows.net/documents"

    def __init__(self, segments: dict[str | None, Any] | None = None) -> None:
        self.segments = segments or {None: ([], None)}
        self.list_calls: list[tuple[str, dict[str, Any]]] = []
        self.files: dict[str, tuple[bytes, str | None]] = {}
        self.created = False
        self.closed = False

    def get_directory_client(self, directory_path: str = "") -> _FakeDirectoryClient:
        return _FakeDirectoryClient(self, directory_path)

    async def create_share(self) -> dict[str, Any]:
        if self.created:
            msg = "The specified share already exists."
            raise ResourceExistsError(msg)
        self.created = True
        return {}

    async def delete_share(self) -> None:
        self.created = False

    async def close(self) -> None:
        self.closed = True


def _file(name: str, size: int) -> SimpleNamespace:
    return SimpleNamespace(name=name, is_directory=False, size=size, last_modified=None)


def _directory(name: str) -> SimpleNamespace:
    return SimpleNamespace(name=name, is_directory=True, last_modified=None)


def _provider(share: _FakeShareClient, **params: Any) -> AzureFilesProvider:
    return AzureFilesProvider(share, AzureFilesParams(container="documents", **params))  # pyright: ignore[reportArgumentType]


@pytest.mark.asyncio
async def test_list_items_mixes_files_and_directories() -> None:
    share = _FakeShareClient(
        {
            None: ([_directory("archive"), _file("a.txt", 5)], "m1"),
            "m1": ([], "m2"),
            "m2": ([_file("b.txt", 7)], None),
        }
    )

    items = [item async for item in _provider(share, directory="inbox").list_items()]

    assert [(item.name, item.is_directory, item.size) for item in items] == [
        ("archive", True, None),
        ("a.txt", False, 5),
        ("b.txt", False, 7),
    ]
    assert [path for path, _ in share.list_calls] == ["inbox", "inbox", "inbox"]


@pytest.mark.asyncio
async def test_list_items_resumes_from_token() -> None:
    share = _FakeShareClient({"m2": ([_file("b.txt", 7)], None)})

    pages = await collect_all(_provider(share).list_items(ContinuationToken.marker("m2")))

    assert len(pages) == 1
    assert pages[0].token == ContinuationToken.marker("m2")
    assert [item.name for item in pages[0].items] == ["b.txt"]


@pytest.mark.asyncio
async def test_listing_root_directory_by_default() -> None:
    share = _FakeShareClient()

    _ = await _provider(share, prefix="rep", batch_size=100).fetch_page(ContinuationToken.initial())

    path, kwargs = share.list_calls[0]
    assert path == ""
    assert kwargs == {"name_starts_with": "rep", "results_per_page": 100}


@pytest.mark.asyncio
async def test_existing_share_is_reused() -> None:
    share = _FakeShareClient()
    provider = _provider(share)

    await provider.create_container()
    await provider.create_container()

    assert share.created


@pytest.mark.asyncio
async def test_upload_and_download_in_root_directory() -> None:
    share = _FakeShareClient()
    provider = _provider(share)

    handle = await provider.upload("notes.txt", b"plain text", "text/plain")

    assert handle.name == "notes.txt"
    assert handle.url == "https://devstore.file.core.windows.net/documents/notes.txt"
    assert share.files["notes.txt"] == (b"plain text", "text/plain")
    assert await provider.download("notes.txt") == b"plain text"


@pytest.mark.asyncio
async def test_delete_missing_file_is_not_found() -> None:
    provider = _provider(_FakeShareClient())

    with pytest.raises(StorageError) as exc_info:
        await provider.delete("ghost.txt")

    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert not await provider.exists("ghost.txt")
