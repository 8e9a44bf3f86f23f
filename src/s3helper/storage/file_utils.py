"""
Key and filename helpers for the S3 file store.

This module provides the glob matcher used by directory listings, the
numeric-suffix naming used by the no-clobber operations and content type
detection for uploads.
"""

import mimetypes
import re
from pathlib import PurePosixPath
from typing import Iterable, Optional, Set, Tuple

from .cloud_storage import ValidationError


_COUNTER_SUFFIX = re.compile(r"^(?P<base>.+)-(?P<count>\d+)$")


class FileUtils:
    """Utility class for key manipulation and file matching."""

    DEFAULT_CONTENT_TYPE = "application/octet-stream"

    def __init__(self):
        mimetypes.init()

    @staticmethod
    def glob_to_regex(pattern: str) -> re.Pattern[str]:
        """
        Translate a basic glob into a compiled regular expression.

        Only ``*`` (any run of characters) and ``?`` (exactly one character)
        are special; everything else matches literally. The expression is
        meant to be used with ``fullmatch``.

        Args:
            pattern: Glob such as ``"*.txt"`` or ``"report-??.csv"``

        Returns:
            Compiled regular expression
        """
        escaped = re.escape(pattern)
        translated = escaped.replace(r"\*", ".*").replace(r"\?", ".")
        return re.compile(translated, re.DOTALL)

    def match(self, name: str, pattern: str) -> bool:
        """Check whether a whole filename matches a glob."""
        return self.glob_to_regex(pattern).fullmatch(name) is not None

    def filter_names(self, names: Iterable[str], pattern: str = "*") -> list:
        """Keep the names matching the glob, preserving order."""
        regex = self.glob_to_regex(pattern)
        return [name for name in names if regex.fullmatch(name)]

    @staticmethod
    def normalize_dirpath(dirpath: Optional[str]) -> str:
        """
        Turn a directory path into a key prefix.

        ``None`` and ``""`` mean the bucket root. A trailing slash is added
        when missing.
        """
        if not dirpath:
            return ""
        if dirpath.startswith("/"):
            raise ValidationError(f"Directory path must not start with '/': {dirpath}")
        return dirpath if dirpath.endswith("/") else dirpath + "/"

    @staticmethod
    def split_name(path: str) -> Tuple[str, str, str]:
        """
        Split a key into directory prefix, stem and extension.

        The extension starts at the last dot of the final segment, unless
        that dot is the segment's first character.

        >>> FileUtils.split_name("docs/report.final.txt")
        ('docs/', 'report.final', '.txt')
        >>> FileUtils.split_name(".profile")
        ('', '.profile', '')
        """
        directory, _, filename = path.rpartition("/")
        if directory:
            directory += "/"
        dot = filename.rfind(".")
        if dot <= 0:
            return directory, filename, ""
        return directory, filename[:dot], filename[dot:]

    def split_counter(self, stem: str) -> Tuple[str, Optional[int]]:
        """Split a stem into its base and trailing ``-<digits>`` counter, if any."""
        found = _COUNTER_SUFFIX.match(stem)
        if found is None:
            return stem, None
        return found.group("base"), int(found.group("count"))

    def strip_counter(self, stem: str) -> str:
        """Remove a trailing ``-<digits>`` counter from a stem."""
        return self.split_counter(stem)[0]

    def candidate_prefix(self, path: str) -> str:
        """Key prefix shared by every suffixed candidate of ``path``."""
        directory, stem, _ = self.split_name(path)
        return f"{directory}{self.strip_counter(stem)}-"

    def suffixed_name(self, path: str, counter: int) -> str:
        """Build the ``counter``-th suffixed variant of ``path``."""
        directory, stem, extension = self.split_name(path)
        return f"{directory}{self.strip_counter(stem)}-{counter}{extension}"

    def next_available_name(self, path: str, taken: Set[str]) -> str:
        """
        Pick the first name not in ``taken``.

        ``path`` itself is returned when it is free. Otherwise counters
        1, 2, ... are appended until a free name turns up. A ``path`` that
        already carries counter N continues from N + 1.

        Args:
            path: Desired key
            taken: Keys already present in the bucket

        Returns:
            A key that is not in ``taken``
        """
        if path not in taken:
            return path

        _, stem, _ = self.split_name(path)
        _, current = self.split_counter(stem)
        counter = 1 if current is None else current + 1
        while True:
            candidate = self.suffixed_name(path, counter)
            if candidate not in taken:
                return candidate
            counter += 1

    def get_content_type(self, key: str) -> str:
        """Guess a MIME type from the key's extension."""
        content_type, _ = mimetypes.guess_type(PurePosixPath(key).name)
        return content_type or self.DEFAULT_CONTENT_TYPE
