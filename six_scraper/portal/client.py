import logging
import time
from collections.abc import Callable, Mapping
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from requests.cookies import RequestsCookieJar

from six_scraper.config import DEFAULT_BASE_URL
from six_scraper.errors import HTTPStatusError, MissingSessionTokenError, NetworkError, ParseError

logger = logging.getLogger(__name__)

# The portal only answers a logged in browser if both of these are forwarded, order decides which one is reported missing
REQUIRED_COOKIES: tuple[str, ...] = ("nissin", "khongguan")

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def build_request(target_url: str, cookies: Mapping[str, str]) -> requests.Request:
    """
    Builds the outbound GET for the portal carrying the caller's session cookies.
    Only presence is checked, the values are forwarded untouched.
    Raises MissingSessionTokenError for the first absent cookie.
    """
    for name in REQUIRED_COOKIES:
        if name not in cookies:
            raise MissingSessionTokenError(name)

    # ! Bound to the portal host, a redirect to any other site must not carry the user's session
    domain = _cookie_domain(target_url)
    jar = RequestsCookieJar()
    for name in REQUIRED_COOKIES:
        jar.set(name, cookies[name], domain=domain, path="/")

    return requests.Request("GET", target_url, cookies=jar, headers={"User-Agent": USER_AGENT})


def _cookie_domain(target_url: str) -> str:
    host = urlparse(target_url).hostname or ""
    # http.cookiejar matches dotless hosts such as localhost as "<host>.local"
    if host and "." not in host:
        return host + ".local"
    return host


class PortalClient:
    """
    Talks to the SIX portal on behalf of a user. One call is one request, there is
    no caching and no retrying here, failures go straight back to the caller.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | tuple[float, float] = 15,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        # * A fresh session per call, a shared cookie jar would hand one user's Set-Cookie to the next
        self.session_factory = session_factory

    def _send(self, request: requests.Request) -> requests.Response:
        """
        Sends a built request following redirects, wrapping every transport failure in NetworkError.
        The body is read before returning so the session can be closed straight away.
        """
        started = time.perf_counter()
        try:
            prepared = request.prepare()
            with self.session_factory() as session:
                response = session.send(prepared, timeout=self.timeout, allow_redirects=True)
        except requests.exceptions.Timeout as error:
            logger.warning("fetch error url=%s duration=%.3fs err=%s", request.url, time.perf_counter() - started, error)
            raise NetworkError(f"Timeout during GET {request.url}") from error
        except requests.exceptions.ConnectionError as error:
            logger.warning("fetch error url=%s duration=%.3fs err=%s", request.url, time.perf_counter() - started, error)
            raise NetworkError(f"Connection error during GET {request.url}") from error
        except requests.exceptions.RequestException as error:
            logger.warning("fetch error url=%s duration=%.3fs err=%s", request.url, time.perf_counter() - started, error)
            raise NetworkError(f"Request failed during GET {request.url}: {error}") from error

        logger.info("fetch url=%s status=%d duration=%.3fs", request.url, response.status_code, time.perf_counter() - started)
        return response

    def fetch_document(self, target_url: str, cookies: Mapping[str, str]) -> BeautifulSoup:
        """
        GETs target_url with the caller's cookies and returns the parsed page.
        Anything but a plain 200 is an HTTPStatusError, the response is closed on every path.
        """
        response = self._send(build_request(target_url, cookies))
        try:
            if response.status_code != requests.codes.ok:
                raise HTTPStatusError(status_code=response.status_code, url=target_url)
            return self._parse(response.content, target_url)
        finally:
            response.close()

    def resolve_final_url(self, target_url: str, cookies: Mapping[str, str]) -> str:
        """
        GETs target_url and reports where the portal's redirects ended up.
        The status is not checked, only the landing URL matters to the caller.
        """
        response = self._send(build_request(target_url, cookies))
        response.close()
        return response.url

    def _parse(self, content: bytes, target_url: str) -> BeautifulSoup:
        started = time.perf_counter()
        try:
            soup = BeautifulSoup(content, "lxml")
        # This should rarely happen, but give the bundled parser a go before giving up
        except ParserRejectedMarkup:
            try:
                soup = BeautifulSoup(content, "html.parser")
            except ParserRejectedMarkup as error:
                raise ParseError(f"Failed to parse HTML returned by {target_url}.") from error

        logger.debug("parse url=%s duration=%.3fs", target_url, time.perf_counter() - started)
        return soup
