from __future__ import annotations

import pytest

from nsstore.services.base import InvalidNameError
from nsstore.services.naming import (
    check_name,
    check_namespace,
    join_key,
    namespace_prefix,
)


class TestCheckName:
    def test_accepts_plain_names(self):
        assert check_name("movies") == "movies"
        assert check_name("fizz/buzz.jpg") == "fizz/buzz.jpg"

    @pytest.mark.parametrize("name", ["..", "../etc", "fizz/../buzz", "a..b"])
    def test_rejects_traversal(self, name):
        with pytest.raises(InvalidNameError) as excinfo:
            check_name(name)
        assert excinfo.value.status == 400
        assert excinfo.value.message == "name cannot contain '..'"


class TestCheckNamespace:
    def test_accepts_plain_name(self):
        assert check_namespace("movies") == "movies"

    @pytest.mark.parametrize("name", ["foo/", "/foo", "foo/bar", "/"])
    def test_rejects_separators(self, name):
        with pytest.raises(InvalidNameError) as excinfo:
            check_namespace(name)
        assert excinfo.value.status == 400
        assert excinfo.value.message == "bucket name cannot contain '/'"

    def test_rejects_empty(self):
        with pytest.raises(InvalidNameError, match="empty"):
            check_namespace("")

    def test_rejects_traversal(self):
        with pytest.raises(InvalidNameError, match=r"\.\."):
            check_namespace("..")


class TestJoinKey:
    def test_prefixes_namespace(self):
        assert join_key("foo", "bar.jpg") == "foo/bar.jpg"

    def test_collapses_leading_and_repeated_slashes(self):
        assert join_key("foo", "/fizz//bar.jpg") == "foo/fizz/bar.jpg"

    def test_keeps_trailing_slash(self):
        assert join_key("foo", "fizz/") == "foo/fizz/"

    def test_empty_key_is_namespace_prefix(self):
        assert join_key("foo", "") == "foo/"
        assert namespace_prefix("foo") == "foo/"
