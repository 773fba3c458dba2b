import pytest
from bs4 import BeautifulSoup

from six_scraper.cache import ScheduleCache
from six_scraper.engine import ScheduleService
from six_scraper.portal import PortalClient

BASE_URL = "https://six.example.test"

SCHEDULE_HTML = """<html><body>
<table class="table"><tbody>
<tr>
    <td>1</td>
    <td>check</td>
    <td>FI1210</td>
    <td>Fisika Dasar</td>
    <td>3</td>
    <td>01</td>
    <td>45</td>
    <td><ul><li>Dosen A</li><li>Dosen B</li></ul></td>
    <td>
        Catatan
        penting
    </td>
    <td>
        <ul>
            <li>Senin / 2024-01-08 / 07:00-09:00 / 7602 / Kuliah / Offline</li>
            <li>Rabu / 2024-01-10 / 13:00-15:00 / 7603 / Kuliah / Online</li>
        </ul>
    </td>
</tr>
<tr>
    <td>2</td>
    <td>check</td>
    <td>FI1220</td>
    <td>Fisika Lanjut</td>
    <td>3</td>
    <td>02</td>
    <td>40</td>
    <td><ul><li>Dosen C</li></ul></td>
    <td></td>
    <td>
        <ul>
            <li>Selasa / 2024-01-09 / 09:00-11:00 / 7604 / Kuliah / Offline</li>
        </ul>
    </td>
</tr>
</tbody></table>
</body></html>"""

HOME_HTML = """<html><body>
<a href="/home">Home</a>
<a href="/app/mahasiswa:10224001/home">Profile</a>
<a href="/app/mahasiswa:99999999/home">Someone else</a>
</body></html>"""

COOKIES = {"nissin": "abc", "khongguan": "xyz"}


def soup_from(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class FakeResponse:
    def __init__(self, url: str, status_code: int = 200, content: bytes | str = b"") -> None:
        self.url = url
        self.status_code = status_code
        self.content = content.encode("utf-8") if isinstance(content, str) else content
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakePortal:
    """
    Stands in for requests.Session. Routes map a request URL to a FakeResponse
    or an exception to raise; every prepared request sent is recorded.
    """

    def __init__(self) -> None:
        self.routes: dict[str, FakeResponse | Exception] = {}
        self.sent = []
        self.responses: list[FakeResponse] = []

    def __call__(self) -> "FakePortal":
        return self

    def __enter__(self) -> "FakePortal":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def route(self, url: str, content: str = "", status_code: int = 200, final_url: str | None = None) -> None:
        self.routes[url] = FakeResponse(final_url or url, status_code=status_code, content=content)

    def fail(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    def send(self, prepared, timeout=None, allow_redirects=True):
        self.sent.append(prepared)
        outcome = self.routes.get(prepared.url)
        if outcome is None:
            return FakeResponse(prepared.url, status_code=404)
        if isinstance(outcome, Exception):
            raise outcome
        self.responses.append(outcome)
        return outcome


@pytest.fixture
def portal() -> FakePortal:
    return FakePortal()


@pytest.fixture
def client(portal: FakePortal) -> PortalClient:
    return PortalClient(base_url=BASE_URL, timeout=5, session_factory=portal)


@pytest.fixture
def cache() -> ScheduleCache:
    return ScheduleCache()


@pytest.fixture
def service(client: PortalClient, cache: ScheduleCache) -> ScheduleService:
    return ScheduleService(client, cache)
