"""
Endpoint parsing tests for pollhttp
"""

import pytest

import pollhttp
from pollhttp import Endpoint, URLParseError


class TestEndpointParse:
    """Test Endpoint.parse"""

    def test_https_default_port(self):
        """Test the websocket URL from the README round-trips"""
        endpoint = pollhttp.parse("https://crypto.dog/websocket")
        assert endpoint.scheme == "https"
        assert endpoint.host == "crypto.dog"
        assert endpoint.port == 443
        assert endpoint.path == "/websocket"
        assert pollhttp.to_string(endpoint) == "https://crypto.dog/websocket"

    def test_http_default_port(self):
        endpoint = Endpoint.parse("http://example.com/index.html")
        assert endpoint.port == 80
        assert str(endpoint) == "http://example.com/index.html"

    def test_explicit_port(self):
        endpoint = Endpoint.parse("http://127.0.0.1:8080/get")
        assert endpoint.host == "127.0.0.1"
        assert endpoint.port == 8080
        assert endpoint.to_string() == "http://127.0.0.1:8080/get"

    def test_explicit_default_port_is_omitted(self):
        """Test an explicit default port is dropped when rebuilding"""
        endpoint = Endpoint.parse("https://example.com:443/a")
        assert endpoint.port == 443
        assert endpoint.to_string() == "https://example.com/a"

    def test_non_default_port_for_https(self):
        endpoint = Endpoint.parse("https://example.com:80/a")
        assert endpoint.to_string() == "https://example.com:80/a"

    def test_missing_path_defaults_to_root(self):
        endpoint = Endpoint.parse("http://example.com")
        assert endpoint.path == "/"
        assert endpoint.to_string() == "http://example.com/"

    def test_nested_path_and_query_are_kept(self):
        endpoint = Endpoint.parse("http://example.com/a/b/c?x=1&y=2")
        assert endpoint.path == "/a/b/c?x=1&y=2"
        assert endpoint.to_string() == "http://example.com/a/b/c?x=1&y=2"

    @pytest.mark.parametrize(
        "url, host, port, path",
        [
            ("http://example.com?x=1", "example.com", 80, "/?x=1"),
            ("http://example.com:8080?x=1", "example.com", 8080, "/?x=1"),
            ("https://example.com#top", "example.com", 443, "/#top"),
        ],
    )
    def test_query_without_path(self, url, host, port, path):
        """Test a query or fragment right after the host ends the authority"""
        endpoint = Endpoint.parse(url)
        assert (endpoint.host, endpoint.port, endpoint.path) == (host, port, path)
        assert Endpoint.parse(endpoint.to_string()) == endpoint

    def test_scheme_is_lowercased(self):
        assert Endpoint.parse("HTTPS://example.com/").scheme == "https"

    def test_ipv6_literal(self):
        endpoint = Endpoint.parse("http://[::1]:8080/x")
        assert endpoint.host == "[::1]"
        assert endpoint.port == 8080

        endpoint = Endpoint.parse("https://[::1]/x")
        assert endpoint.host == "[::1]"
        assert endpoint.port == 443

    def test_other_scheme_with_port(self):
        endpoint = Endpoint.parse("ws://localhost:9000/socket")
        assert endpoint.default_port is None
        assert endpoint.to_string() == "ws://localhost:9000/socket"

    @pytest.mark.parametrize(
        "url",
        [
            "http://example.com/",
            "https://example.com/path",
            "http://example.com:8080/path",
            "https://sub.example.com:8443/a/b?c=d",
        ],
    )
    def test_round_trip(self, url):
        """Test to_string(parse(s)) reproduces s"""
        endpoint = Endpoint.parse(url)
        assert endpoint.to_string() == url
        assert Endpoint.parse(endpoint.to_string()) == endpoint


class TestEndpointParseErrors:
    """Test malformed URLs fail loudly"""

    @pytest.mark.parametrize(
        "url",
        [
            "not-a-valid-url",
            "example.com/path",
            "://example.com/",
            "http:///path",
            "http://example.com:abc/",
            "http://example.com:0/",
            "http://example.com:70000/",
            "http://example.com:/",
            "http://?x=1",
            "http://example.com:abc?x=1",
            "ftp://example.com/",
        ],
    )
    def test_invalid_urls(self, url):
        with pytest.raises(URLParseError) as exc_info:
            Endpoint.parse(url)
        assert exc_info.value.url == url

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            pollhttp.parse("nope")

    def test_non_string(self):
        with pytest.raises(URLParseError):
            Endpoint.parse(None)

    def test_endpoint_is_immutable(self):
        endpoint = Endpoint.parse("http://example.com/")
        with pytest.raises(AttributeError):
            endpoint.port = 81
