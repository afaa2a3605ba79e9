"""
Endpoint model: scheme, host, port and path of a request target
"""

from dataclasses import dataclass

from pollhttp._exceptions import URLParseError

SCHEME_SEPARATOR = "://"

DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
}


@dataclass(frozen=True)
class Endpoint:
    """Parsed address of a server a Request targets"""

    scheme: str
    host: str
    port: int
    path: str = "/"

    @classmethod
    def parse(cls, raw):
        """Parse ``scheme://host[:port][/path]`` into an Endpoint.

        Raises:
            URLParseError: if the scheme separator, scheme or host is
                missing, or the port is not a valid TCP port.
        """
        if not isinstance(raw, str):
            raise URLParseError(f"URL must be a string, got {type(raw).__name__}", url=raw)

        scheme, sep, rest = raw.partition(SCHEME_SEPARATOR)
        if not sep:
            raise URLParseError(f"missing '{SCHEME_SEPARATOR}' in URL: {raw!r}", url=raw)
        if not scheme:
            raise URLParseError(f"missing scheme in URL: {raw!r}", url=raw)
        scheme = scheme.lower()

        # the authority ends at the first path, query or fragment delimiter
        cut = min((i for i in map(rest.find, "/?#") if i >= 0), default=len(rest))
        authority, path = rest[:cut], rest[cut:]
        if not path.startswith("/"):
            path = "/" + path

        # a bracketed IPv6 literal carries its own colons
        if authority.endswith("]") or ":" not in authority:
            host, port_text = authority, None
        else:
            host, _, port_text = authority.rpartition(":")

        if port_text is None:
            port = DEFAULT_PORTS.get(scheme)
            if port is None:
                raise URLParseError(
                    f"no default port for scheme {scheme!r}: {raw!r}", url=raw
                )
        else:
            if not port_text.isascii() or not port_text.isdigit():
                raise URLParseError(f"invalid port {port_text!r} in URL: {raw!r}", url=raw)
            port = int(port_text)
            if not 0 < port < 65536:
                raise URLParseError(f"port {port} out of range in URL: {raw!r}", url=raw)

        if not host:
            raise URLParseError(f"missing host in URL: {raw!r}", url=raw)

        return cls(scheme=scheme, host=host, port=port, path=path)

    @property
    def default_port(self):
        """Conventional port for this endpoint's scheme, or None"""
        return DEFAULT_PORTS.get(self.scheme)

    def to_string(self):
        """Rebuild the URL, omitting the port when it is the scheme default"""
        port = "" if self.port == self.default_port else f":{self.port}"
        return f"{self.scheme}{SCHEME_SEPARATOR}{self.host}{port}{self.path}"

    def __str__(self):
        return self.to_string()


def parse(raw):
    """Parse a URL string into an Endpoint"""
    return Endpoint.parse(raw)


def to_string(endpoint):
    """Rebuild a URL string from an Endpoint"""
    return endpoint.to_string()
