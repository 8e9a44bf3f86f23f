import pytest

from s3helper.storage.cloud_storage import ValidationError
from s3helper.storage.file_utils import FileUtils


@pytest.fixture
def utils() -> FileUtils:
    return FileUtils()


class TestGlobMatching:
    """Test suite for glob translation."""

    @pytest.mark.parametrize(
        "name,pattern",
        [
            ("tests-testfile.txt", "*"),
            ("tests-testfile.txt", "tests-testfile.txt"),
            ("tests-testfile.txt", "tests-test*"),
            ("tests-testfile.txt", "*.txt"),
            ("tests-testfile.txt", "t?sts-testfile.tx?"),
            ("tests-testfile.txt", "??????????????????"),
            ("happyfile", "h*e"),
            ("", "*"),
        ],
    )
    def test_matches(self, utils: FileUtils, name: str, pattern: str) -> None:
        assert utils.match(name, pattern)

    @pytest.mark.parametrize(
        "name,pattern",
        [
            ("tests-testfile.txt", "tests-testfile.txt?"),
            ("tests-testfile.txt", "tests-testfile.txtz*"),
            ("tests-testfile.txt", "*.csv"),
            ("tests-testfile.txt", "?????????????????"),
            ("happyfile", "happy"),
            ("", "?"),
        ],
    )
    def test_does_not_match(self, utils: FileUtils, name: str, pattern: str) -> None:
        assert not utils.match(name, pattern)

    def test_regex_metacharacters_are_literal(self, utils: FileUtils) -> None:
        assert utils.match("a.b", "a.b")
        assert not utils.match("axb", "a.b")
        assert utils.match("report(1)+[v2].txt", "report(1)+[v2].*")
        assert not utils.match("aab", "a+b")

    def test_star_spans_slashes_and_newlines(self, utils: FileUtils) -> None:
        assert utils.match("a/b\nc", "a*c")

    def test_filter_names_keeps_order(self, utils: FileUtils) -> None:
        names = ["b.txt", "a.csv", "a.txt", "c.txt"]
        assert utils.filter_names(names, "*.txt") == ["b.txt", "a.txt", "c.txt"]
        assert utils.filter_names(names) == names


class TestDirectoryPaths:
    """Test suite for directory prefix normalization."""

    @pytest.mark.parametrize(
        "dirpath,expected",
        [
            (None, ""),
            ("", ""),
            ("tests-tmp", "tests-tmp/"),
            ("tests-tmp/", "tests-tmp/"),
            ("tests-tmp/subdir", "tests-tmp/subdir/"),
        ],
    )
    def test_normalize(self, dirpath: str | None, expected: str) -> None:
        assert FileUtils.normalize_dirpath(dirpath) == expected

    def test_leading_slash_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FileUtils.normalize_dirpath("/tests-tmp")

    def test_normalize_does_not_mutate_argument(self) -> None:
        dirpath = "tests-tmp"
        FileUtils.normalize_dirpath(dirpath)
        assert dirpath == "tests-tmp"


class TestSuffixNaming:
    """Test suite for collision-free name generation."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("notes.txt", ("", "notes", ".txt")),
            ("dir/sub/notes.txt", ("dir/sub/", "notes", ".txt")),
            ("archive.tar.gz", ("", "archive.tar", ".gz")),
            ("happyfile", ("", "happyfile", "")),
            (".profile", ("", ".profile", "")),
            ("dir.d/happyfile", ("dir.d/", "happyfile", "")),
        ],
    )
    def test_split_name(self, path: str, expected: tuple) -> None:
        assert FileUtils.split_name(path) == expected

    def test_free_name_returned_unchanged(self, utils: FileUtils) -> None:
        assert utils.next_available_name("notes.txt", set()) == "notes.txt"

    def test_first_suffix(self, utils: FileUtils) -> None:
        taken = {"tests-testfile.txt"}
        assert utils.next_available_name("tests-testfile.txt", taken) == "tests-testfile-1.txt"

    def test_suffix_without_extension(self, utils: FileUtils) -> None:
        taken = {"tests-tmp/happyfile"}
        assert utils.next_available_name("tests-tmp/happyfile", taken) == "tests-tmp/happyfile-1"

    def test_skips_taken_suffixes(self, utils: FileUtils) -> None:
        taken = {"f.txt", "f-1.txt", "f-2.txt", "f-4.txt"}
        assert utils.next_available_name("f.txt", taken) == "f-3.txt"

    def test_existing_counter_is_incremented(self, utils: FileUtils) -> None:
        taken = {"f.txt", "f-1.txt"}
        assert utils.next_available_name("f-1.txt", taken) == "f-2.txt"

    def test_existing_counter_never_goes_down(self, utils: FileUtils) -> None:
        assert utils.next_available_name("report-5.txt", {"report-5.txt"}) == "report-6.txt"
        assert utils.next_available_name("photo-2024.jpg", {"photo-2024.jpg", "photo-2025.jpg"}) == "photo-2026.jpg"

    def test_split_counter(self, utils: FileUtils) -> None:
        assert utils.split_counter("report-5") == ("report", 5)
        assert utils.split_counter("report") == ("report", None)
        assert utils.split_counter("-5") == ("-5", None)

    def test_candidate_prefix(self, utils: FileUtils) -> None:
        assert utils.candidate_prefix("dir/f-3.txt") == "dir/f-"
        assert utils.candidate_prefix("happyfile") == "happyfile-"


class TestContentType:
    """Test suite for MIME type detection."""

    def test_known_extension(self, utils: FileUtils) -> None:
        assert utils.get_content_type("docs/readme.txt") == "text/plain"

    def test_unknown_extension(self, utils: FileUtils) -> None:
        assert utils.get_content_type("happyfile") == "application/octet-stream"
