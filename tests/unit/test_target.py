"""
Unit tests for target resolution.
"""

import os

import pytest

from fileserver.http.errors import ForbiddenError, ResourceNotFoundError
from fileserver.http.target import (
    ResolvedTarget,
    Target,
    TargetResolver,
    extract_extension,
)


class TestTarget:
    """Tests for splitting path and query."""

    def test_no_query(self):
        """Without "?" the query is empty."""
        assert Target.parse("/index.html") == Target("/index.html", "")

    def test_query(self):
        """The query is everything after "?"."""
        assert Target.parse("/run.php?x=1&y=2") == Target("/run.php", "x=1&y=2")

    def test_empty_query(self):
        """A trailing "?" gives an empty query."""
        assert Target.parse("/run.php?") == Target("/run.php", "")

    def test_only_first_question_mark_splits(self):
        """Later "?" belong to the query."""
        assert Target.parse("/run.php?a=?b") == Target("/run.php", "a=?b")


class TestExtractExtension:
    """The extension starts after the FIRST dot of the whole path."""

    def test_simple(self):
        """One dot, one extension."""
        assert extract_extension("/srv/www/index.html") == "html"

    def test_no_dot(self):
        """No dot means no extension."""
        assert extract_extension("/srv/www/README") == ""

    def test_multiple_dots_in_name(self):
        """Everything after the first dot counts."""
        # Known quirk: app.min.js has extension "min.js", not "js"
        assert extract_extension("/srv/www/app.min.js") == "min.js"

    def test_dot_in_root(self):
        """The search covers the whole path, root included."""
        # Known quirk: a dotted root swallows the rest of the path
        assert extract_extension("/srv/site.d/index.html") == "d/index.html"


class TestTargetResolver:
    """Tests for TargetResolver.resolve()."""

    def test_existing_file(self, docroot):
        """Root and path are joined verbatim."""
        resolved = TargetResolver(str(docroot)).resolve("/index.html")

        assert resolved == ResolvedTarget(
            path=str(docroot) + "/index.html",
            query="",
            extension="html",
        )

    def test_query_is_stripped_from_path(self, docroot):
        """The query is kept apart from the file path."""
        resolved = TargetResolver(str(docroot)).resolve("/run.php?x=1")

        assert resolved.path == str(docroot) + "/run.php"
        assert resolved.query == "x=1"
        assert resolved.extension == "php"

    def test_missing_file(self, docroot):
        """A missing file is a 404."""
        with pytest.raises(ResourceNotFoundError) as exc_info:
            TargetResolver(str(docroot)).resolve("/missing.html")

        assert exc_info.value.status_code == 404

    def test_query_does_not_count_for_existence(self, docroot):
        """Only the path part is checked."""
        with pytest.raises(ResourceNotFoundError):
            TargetResolver(str(docroot)).resolve("/missing.html?index.html")

    def test_no_normalisation(self, docroot):
        """Paths are concatenated verbatim, .. included."""
        sub = docroot / "sub"
        sub.mkdir()

        resolved = TargetResolver(str(sub)).resolve("/../index.html")
        assert resolved.path == str(sub) + "/../index.html"

    def test_unreadable_file(self, docroot, as_root):
        """An unreadable file is a 403."""
        if as_root:
            pytest.skip("root can read any file")

        secret = docroot / "secret.html"
        secret.write_bytes(b"top secret")
        os.chmod(secret, 0o000)
        try:
            with pytest.raises(ForbiddenError) as exc_info:
                TargetResolver(str(docroot)).resolve("/secret.html")
        finally:
            os.chmod(secret, 0o644)

        assert exc_info.value.status_code == 403

    def test_missing_wins_over_unreadable_directory(self, docroot, as_root):
        """Existence is checked before readability."""
        if as_root:
            pytest.skip("root can traverse any directory")

        locked = docroot / "locked"
        locked.mkdir()
        os.chmod(locked, 0o000)
        try:
            with pytest.raises(ResourceNotFoundError):
                TargetResolver(str(docroot)).resolve("/locked/a.html")
        finally:
            os.chmod(locked, 0o755)
