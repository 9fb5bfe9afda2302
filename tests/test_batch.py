"""Tests for bulk operations and asset transfers."""

import threading
from pathlib import Path

import pytest
from fake_linear import FakeLinear

from linctl.assets import (
    asset_filename,
    download_attachments,
    download_images,
    ensure_output_dir,
    guess_content_type,
    parse_markdown_images,
    sanitize_filename,
    upload_file,
    url_extension,
    validate_url,
)
from linctl.batch import Indexed, run_batch, select_by_index
from linctl.client import LinearClient
from linctl.errors import (
    DownloadFailedError,
    IndexOutOfBoundsError,
    InvalidUrlError,
    MissingFileError,
    OutputDirNotFoundError,
    UploadFailedError,
)
from linctl.models import Attachment

BASE = "https://uploads.linear.app/ws"


def _attachments(count: int) -> list[Attachment]:
    return [
        Attachment(
            id=f"att-{i}",
            title="report.pdf",
            created_at="2024-01-15T10:30:00.000Z",
            url=f"{BASE}/{i}/report.pdf",
        )
        for i in range(1, count + 1)
    ]


class TestRunBatch:
    """Test the batch coordinator."""

    def test_outcomes_keep_input_order(self, tmp_path: Path) -> None:
        """Outcomes follow the input order even when run concurrently."""
        items = [Indexed(i, i) for i in range(1, 9)]

        def operation(entry: Indexed[int]) -> Path:
            return tmp_path / f"{entry.item}"

        result = run_batch(items, operation, max_workers=4)

        assert [o.index for o in result.outcomes] == list(range(1, 9))
        assert [o.path for o in result.outcomes] == [tmp_path / f"{i}" for i in range(1, 9)]

    def test_failure_does_not_stop_batch(self, tmp_path: Path) -> None:
        """One failing item is recorded; the others still run."""
        items = [Indexed(i, i) for i in range(1, 4)]

        def operation(entry: Indexed[int]) -> Path:
            if entry.item == 2:
                raise DownloadFailedError("https://x", 500)
            return tmp_path / f"{entry.item}"

        result = run_batch(items, operation)

        assert [o.ok for o in result.outcomes] == [True, False, True]
        assert len(result.successes) + len(result.failures) == len(result) == 3
        assert "500" in (result.failures[0].error or "")

    def test_os_errors_are_recorded(self) -> None:
        """A write failure is a per-item failure."""

        def operation(entry: Indexed[int]) -> Path:
            msg = "disk full"
            raise OSError(msg)

        result = run_batch([Indexed(1, 1)], operation)

        assert result.failures[0].error == "disk full"

    def test_sequential_mode(self, tmp_path: Path) -> None:
        """max_workers=1 runs every item on the calling thread."""
        threads: set[int] = set()

        def operation(entry: Indexed[int]) -> Path:
            threads.add(threading.get_ident())
            return tmp_path

        run_batch([Indexed(i, i) for i in range(1, 5)], operation, max_workers=1)

        assert threads == {threading.get_ident()}


class TestSelectByIndex:
    """Test 1-based item selection."""

    def test_all_items(self) -> None:
        """No index selects everything, numbered from 1."""
        selected = select_by_index(["a", "b"], None)

        assert [(s.index, s.item) for s in selected] == [(1, "a"), (2, "b")]

    def test_single_item_keeps_its_number(self) -> None:
        """The selected item keeps its position in the full list."""
        selected = select_by_index(["a", "b", "c"], 3)

        assert [(s.index, s.item) for s in selected] == [(3, "c")]

    @pytest.mark.parametrize("index", [0, 4, -1])
    def test_out_of_range(self, index: int) -> None:
        """Positions outside 1..N are rejected."""
        with pytest.raises(IndexOutOfBoundsError) as exc_info:
            select_by_index(["a", "b", "c"], index)

        assert exc_info.value.total == 3


class TestFilenames:
    """Test filename derivation."""

    def test_sanitize(self) -> None:
        """Unsafe characters become underscores."""
        assert sanitize_filename("my file (1)/x.png") == "my_file__1__x.png"

    def test_title_with_known_extension(self) -> None:
        """A title that is already a filename keeps its extension and gains the index."""
        assert asset_filename("design v2.png", 1, f"{BASE}/abc") == "design_v2_1.png"
        assert asset_filename("Shot.PNG", 4, f"{BASE}/abc.jpg") == "Shot_4.png"

    def test_same_title_different_index(self) -> None:
        """Two assets with one title never share a name."""
        names = {asset_filename("image.png", i, f"{BASE}/{i}") for i in (1, 2)}

        assert names == {"image_1.png", "image_2.png"}

    def test_title_without_extension_gets_index_and_url_extension(self) -> None:
        """Other titles get the index and the URL's extension."""
        assert asset_filename("Design", 2, f"{BASE}/abc/design.pdf") == "Design_2.pdf"

    def test_empty_title_uses_fallback_stem(self) -> None:
        """Without a title the fallback stem is used."""
        assert asset_filename("", 3, f"{BASE}/abc/x.gif") == "attachment_3.gif"

    def test_fallback_extension(self) -> None:
        """A URL without an extension falls back per asset kind."""
        assert asset_filename("", 1, f"{BASE}/abc") == "attachment_1.bin"
        assert (
            asset_filename("", 1, f"{BASE}/abc", fallback_stem="image", fallback_ext="png")
            == "image_1.png"
        )

    def test_prefix(self) -> None:
        """A prefix namespaces files per issue."""
        assert asset_filename("a.png", 1, BASE, prefix="ENG-1__") == "ENG-1__a_1.png"

    def test_url_extension_ignores_query(self) -> None:
        """Query strings do not leak into the extension."""
        assert url_extension("https://x.com/a/b.JPG?sig=123") == "jpg"
        assert url_extension("https://x.com/a/b") is None

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("a.png", "image/png"),
            ("a.JPEG", "image/jpeg"),
            ("notes.md", "text/markdown"),
            ("archive.tar.gz", "application/gzip"),
            ("blob", "application/octet-stream"),
            ("a.xyz", "application/octet-stream"),
        ],
    )
    def test_content_type(self, name: str, expected: str) -> None:
        """Content types are guessed from the extension."""
        assert guess_content_type(name) == expected


class TestMarkdownImages:
    """Test image extraction from descriptions."""

    def test_extracts_in_order(self) -> None:
        """Images are found in document order with their alt text."""
        markdown = (
            "Intro ![first](https://a.com/1.png) text\n"
            '![](https://a.com/2.jpg "title")\n'
            "[not an image](https://a.com/3.png)"
        )

        images = parse_markdown_images(markdown)

        assert [(i.alt_text, i.url) for i in images] == [
            ("first", "https://a.com/1.png"),
            ("", "https://a.com/2.jpg"),
        ]

    def test_no_images(self) -> None:
        """Plain text has no images."""
        assert parse_markdown_images("nothing here") == []


class TestValidation:
    """Test input validation helpers."""

    @pytest.mark.parametrize("url", ["ftp://x.com/a", "not a url", "https://", "/path"])
    def test_invalid_urls(self, url: str) -> None:
        """Only absolute http(s) URLs are accepted."""
        with pytest.raises(InvalidUrlError):
            validate_url(url)

    def test_valid_url(self) -> None:
        """An https URL passes through."""
        assert validate_url("https://example.com/a") == "https://example.com/a"

    def test_missing_output_dir(self, tmp_path: Path) -> None:
        """A missing directory is an error unless creation is requested."""
        target = tmp_path / "out"

        with pytest.raises(OutputDirNotFoundError):
            ensure_output_dir(target)

        assert ensure_output_dir(target, create=True).is_dir()


class TestDownloadAttachments:
    """Test attachment batches end to end against the fake endpoint."""

    def test_partial_failure(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """Three attachments with the second returning 404."""
        attachments = _attachments(3)
        fake.asset(f"{BASE}/1/report.pdf", content=b"one")
        fake.asset(f"{BASE}/2/report.pdf", status=404)
        fake.asset(f"{BASE}/3/report.pdf", content=b"three")

        result = download_attachments(client, attachments, tmp_path, prefix="ENG-1__")

        assert [o.ok for o in result.outcomes] == [True, False, True]
        assert (tmp_path / "ENG-1__report_1.pdf").read_bytes() == b"one"
        assert (tmp_path / "ENG-1__report_3.pdf").read_bytes() == b"three"
        assert not (tmp_path / "ENG-1__report_2.pdf").exists()

    def test_index_out_of_bounds_fetches_nothing(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """Asking for #5 of 3 fails before any asset request."""
        with pytest.raises(IndexOutOfBoundsError):
            download_attachments(client, _attachments(3), tmp_path, index=5)

        assert fake.asset_requests == []

    def test_single_index(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """Only the selected attachment is fetched."""
        fake.asset(f"{BASE}/2/report.pdf", content=b"two")

        result = download_attachments(client, _attachments(3), tmp_path, index=2)

        assert [o.index for o in result.outcomes] == [2]
        assert len(fake.asset_requests) == 1

    def test_attachment_without_url_fails(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """A link-less attachment is a recorded failure."""
        attachment = Attachment(id="a", title="x", created_at="2024-01-01T00:00:00Z")

        result = download_attachments(client, [attachment], tmp_path)

        assert result.failures[0].index == 1


class TestDownloadImages:
    """Test image batches."""

    def test_downloads_with_fallback_names(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """Images without alt text are named image_<n>."""
        images = parse_markdown_images(
            f"![]({BASE}/img/a1) ![diagram]({BASE}/img/b2.jpg)",
        )
        fake.asset(f"{BASE}/img/a1", content=b"a")
        fake.asset(f"{BASE}/img/b2.jpg", content=b"b")

        result = download_images(client, images, tmp_path)

        assert [o.ok for o in result.outcomes] == [True, True]
        assert (tmp_path / "image_1.png").read_bytes() == b"a"
        assert (tmp_path / "diagram_2.jpg").read_bytes() == b"b"

    def test_same_alt_text_gets_distinct_files(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """Two pasted screenshots both named image.png land in two files."""
        images = parse_markdown_images(
            f"![image.png]({BASE}/img/one) ![image.png]({BASE}/img/two)",
        )
        fake.asset(f"{BASE}/img/one", content=b"1")
        fake.asset(f"{BASE}/img/two", content=b"2")

        result = download_images(client, images, tmp_path, prefix="ENG-1__")

        paths = {o.path for o in result.outcomes}
        assert len(paths) == 2
        assert (tmp_path / "ENG-1__image_1.png").read_bytes() == b"1"
        assert (tmp_path / "ENG-1__image_2.png").read_bytes() == b"2"


class TestDownloadAttachmentsSameTitle:
    """Test attachments that share a title."""

    def test_each_gets_its_own_file(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """Every attachment is written, none overwrites another."""
        for i in (1, 2, 3):
            fake.asset(f"{BASE}/{i}/report.pdf", content=str(i).encode())

        result = download_attachments(client, _attachments(3), tmp_path)

        assert all(o.ok for o in result.outcomes)
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "report_1.pdf",
            "report_2.pdf",
            "report_3.pdf",
        ]


class TestUploadFile:
    """Test the three-step upload protocol."""

    def test_three_steps(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """Signed target, PUT with headers, then attachment creation."""
        path = tmp_path / "notes.txt"
        path.write_bytes(b"hello")
        fake.on(
            "FileUpload",
            {
                "fileUpload": {
                    "success": True,
                    "uploadFile": {
                        "uploadUrl": "https://storage.example.com/put",
                        "assetUrl": f"{BASE}/asset/notes.txt",
                        "headers": [{"key": "x-amz-acl", "value": "private"}],
                    },
                },
            },
        )
        fake.asset("https://storage.example.com/put")
        fake.on(
            "AttachmentCreate",
            {
                "attachmentCreate": {
                    "success": True,
                    "attachment": {"id": "att", "title": "notes.txt", "url": "u"},
                },
            },
        )

        result = upload_file(client, "ENG-1", path)

        assert result.success
        assert fake.calls("FileUpload") == [
            {"filename": "notes.txt", "contentType": "text/plain", "size": 5},
        ]
        put = fake.asset_requests[0]
        assert put.method == "PUT"
        assert put.content == b"hello"
        assert put.headers["Content-Type"] == "text/plain"
        assert put.headers["x-amz-acl"] == "private"
        assert fake.calls("AttachmentCreate") == [
            {"issueId": "ENG-1", "url": f"{BASE}/asset/notes.txt", "title": "notes.txt"},
        ]

    def test_failed_put_skips_attachment_creation(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """A rejected upload aborts before step three."""
        path = tmp_path / "a.png"
        path.write_bytes(b"png")
        fake.on(
            "FileUpload",
            {
                "fileUpload": {
                    "success": True,
                    "uploadFile": {
                        "uploadUrl": "https://storage.example.com/put",
                        "assetUrl": "https://x",
                        "headers": [],
                    },
                },
            },
        )
        fake.asset("https://storage.example.com/put", status=500)

        with pytest.raises(UploadFailedError):
            upload_file(client, "ENG-1", path)

        assert "AttachmentCreate" not in fake.operations

    def test_missing_file(
        self,
        fake: FakeLinear,
        client: LinearClient,
        tmp_path: Path,
    ) -> None:
        """A missing path fails before any request."""
        with pytest.raises(MissingFileError):
            upload_file(client, "ENG-1", tmp_path / "nope.txt")

        assert fake.payloads == []
