import pytest

from scraped import InvalidUrlError, Locator, validate


class TestValidate:

    def test_valid_string_url_is_accepted(self):
        assert str(validate("https://dev.null")) == "https://dev.null/"

    @pytest.mark.parametrize("raw", [
        "not a url",
        "\\x!//",
        "",
        "   ",
        "dev.null/path",
        "/relative/path",
        "ftp://files.example.com/a",
        "mailto:someone@example.com",
        "https://",
        "http://exa mple.com",
        "https://example.com:99999/",
    ])
    def test_invalid_urls_are_rejected(self, raw):
        with pytest.raises(InvalidUrlError):
            validate(raw)

    def test_non_string_is_rejected(self):
        with pytest.raises(InvalidUrlError):
            validate(None)

    def test_scheme_and_host_are_normalized(self):
        loc = validate("  HTTPS://Example.COM:8443/Path?q=1#frag ")
        assert str(loc) == "https://example.com:8443/Path?q=1#frag"
        assert loc.scheme == "https"
        assert loc.host == "example.com"
        assert loc.origin == "https://example.com:8443"

    def test_error_carries_input(self):
        with pytest.raises(InvalidUrlError) as exc_info:
            validate("not a url")
        assert exc_info.value.url == "not a url"
        assert exc_info.value.to_response()["error"] == "InvalidUrlError"


class TestLocator:

    def test_equality_and_hash(self):
        a = Locator("https://google.com")
        b = Locator("https://GOOGLE.com/")
        assert a == b
        assert len({a, b}) == 1
        assert Locator(a) == a

    def test_domain_is_none_for_ip_hosts(self):
        assert Locator("http://127.0.0.1:8000/").domain is None
        assert Locator("https://docs.rs/").domain == "docs.rs"

    def test_join_resolves_relative_links(self):
        base = Locator("https://dev.null/docs/index.html")
        assert str(base.join("/about")) == "https://dev.null/about"
        assert str(base.join("page.html")) == "https://dev.null/docs/page.html"
        assert str(base.join("https://other.org")) == "https://other.org/"

    def test_join_rejects_non_page_links(self):
        with pytest.raises(InvalidUrlError):
            Locator("https://dev.null/").join("javascript:void(0)")
