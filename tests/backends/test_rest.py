"""Tests for the REST backend."""

import json
from collections.abc import Callable

import httpx
import pytest

from master_portal.backends.rest import RestBackend, create_client
from master_portal.errors import DuplicateError, NotFoundError, ServerError, ValidationError
from master_portal.models import Employee, Grade, PagedResult, Technology
from master_portal.resources import EMPLOYEE, GRADE, TECHNOLOGY

BASE_URL = "http://portal.test/api/"

Handler = Callable[[httpx.Request], httpx.Response]


class Recorder:
    """Mock transport handler that records requests and replays canned responses."""

    def __init__(self, response: httpx.Response | Handler) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self.response):
            return self.response(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_backend(spec, recorder: Recorder) -> RestBackend:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder), base_url=BASE_URL)
    return RestBackend(spec, client)


@pytest.mark.asyncio
async def test_list_paged_employees() -> None:
    """Test that paging is sent as query parameters and the envelope decoded."""
    envelope = {
        "items": [{"employee_Id": 1, "name": "John Doe", "email": "john.doe@test.com"}],
        "totalCount": 25,
        "page": 2,
        "pageSize": 10,
    }
    recorder = Recorder(httpx.Response(200, json=envelope))
    backend = make_backend(EMPLOYEE, recorder)

    result = await backend.list_entities(page=2, page_size=10)

    assert recorder.last.method == "GET"
    assert recorder.last.url.path == "/api/employee/paged"
    assert recorder.last.url.params["page"] == "2"
    assert recorder.last.url.params["pageSize"] == "10"
    assert isinstance(result, PagedResult)
    assert result.total_pages == 3
    assert result.items[0] == Employee(employee_id=1, name="John Doe", email="john.doe@test.com")


@pytest.mark.asyncio
async def test_list_full_collection() -> None:
    """Test the unpaged list returning a bare array."""
    recorder = Recorder(httpx.Response(200, json=[{"id": 1, "technologyStack": "Angular"}, {"id": 2, "technologyStack": "React"}]))
    backend = make_backend(TECHNOLOGY, recorder)

    result = await backend.list_entities()

    assert recorder.last.url.path == "/api/Technologies"
    assert result == [Technology(id=1, technology_stack="Angular"), Technology(id=2, technology_stack="React")]


@pytest.mark.asyncio
async def test_list_ignores_page_for_unpaged_resource() -> None:
    """Test that resources without a paged path return the full collection."""
    recorder = Recorder(httpx.Response(200, json=[]))
    backend = make_backend(GRADE, recorder)

    result = await backend.list_entities(page=1, page_size=10)

    assert recorder.last.url.path == "/api/Grade"
    assert not recorder.last.url.params
    assert result == []


@pytest.mark.asyncio
async def test_read() -> None:
    """Test reading a single entity."""
    recorder = Recorder(httpx.Response(200, json={"gradeId": 3, "gradeLevel": "Lead", "gradeDescription": "Tech lead"}))
    backend = make_backend(GRADE, recorder)

    grade = await backend.read(3)

    assert recorder.last.url.path == "/api/Grade/3"
    assert grade == Grade(grade_id=3, grade_level="Lead", grade_description="Tech lead")


@pytest.mark.asyncio
async def test_read_not_found() -> None:
    """Test that 404 becomes NotFoundError."""
    backend = make_backend(GRADE, Recorder(httpx.Response(404)))
    with pytest.raises(NotFoundError):
        await backend.read(999)


@pytest.mark.asyncio
async def test_create_posts_payload() -> None:
    """Test that create posts the wire payload and returns the echoed record."""

    def echo(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(201, json=body | {"gradeId": 11})

    recorder = Recorder(echo)
    backend = make_backend(GRADE, recorder)

    created = await backend.create(Grade(grade_level="Senior", grade_description="Senior engineer"))

    assert recorder.last.method == "POST"
    assert recorder.last.url.path == "/api/Grade"
    assert json.loads(recorder.last.content) == {"gradeLevel": "Senior", "gradeDescription": "Senior engineer"}
    assert created.grade_id == 11


@pytest.mark.asyncio
async def test_update_puts_to_item_path() -> None:
    """Test that update sends PUT to the entity's path."""
    recorder = Recorder(httpx.Response(204))
    backend = make_backend(TECHNOLOGY, recorder)
    technology = Technology(id=4, technology_stack="Python, Django")

    updated = await backend.update(technology)

    assert recorder.last.method == "PUT"
    assert recorder.last.url.path == "/api/Technologies/4"
    assert json.loads(recorder.last.content) == {"id": 4, "technologyStack": "Python, Django"}
    assert updated == technology


@pytest.mark.asyncio
async def test_update_requires_id() -> None:
    """Test that an entity without ID cannot be updated."""
    recorder = Recorder(httpx.Response(200))
    backend = make_backend(TECHNOLOGY, recorder)
    with pytest.raises(ValidationError):
        await backend.update(Technology(technology_stack="Rust"))
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_delete() -> None:
    """Test that delete sends DELETE to the entity's path."""
    recorder = Recorder(httpx.Response(200))
    backend = make_backend(EMPLOYEE, recorder)

    await backend.delete(1)

    assert recorder.last.method == "DELETE"
    assert recorder.last.url.path == "/api/Employee/1"


@pytest.mark.asyncio
async def test_delete_unknown_id_raises() -> None:
    """Test that deleting an unknown ID surfaces NotFoundError."""
    backend = make_backend(EMPLOYEE, Recorder(httpx.Response(404)))
    with pytest.raises(NotFoundError):
        await backend.delete(42)


@pytest.mark.parametrize(
    ("response", "error"),
    [
        (httpx.Response(409, text="conflict"), DuplicateError),
        (httpx.Response(400, json={"message": "Duplicate key gradeLevel"}), DuplicateError),
        (httpx.Response(400, json={"message": "gradeLevel is invalid"}), ValidationError),
        (httpx.Response(422, text="bad"), ValidationError),
        (httpx.Response(500, text="boom"), ServerError),
        (httpx.Response(503), ServerError),
    ],
)
@pytest.mark.asyncio
async def test_error_mapping(response: httpx.Response, error: type[Exception]) -> None:
    """Test the status code to error type mapping."""
    backend = make_backend(GRADE, Recorder(response))
    with pytest.raises(error):
        await backend.create(Grade(grade_level="Senior", grade_description="Senior engineer"))


@pytest.mark.asyncio
async def test_transport_error_is_server_error() -> None:
    """Test that an unreachable backend becomes ServerError."""

    def fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    backend = make_backend(GRADE, Recorder(fail))
    with pytest.raises(ServerError, match="Could not reach backend"):
        await backend.list_entities()


@pytest.mark.asyncio
async def test_html_success_body_is_server_error() -> None:
    """Test that a 200 gateway page instead of JSON becomes ServerError."""
    response = httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "text/html"})
    backend = make_backend(GRADE, Recorder(response))

    with pytest.raises(ServerError, match="invalid body"):
        await backend.list_entities()
    with pytest.raises(ServerError, match="invalid body"):
        await backend.read(1)


@pytest.mark.parametrize(
    "body",
    [
        {"items": "not a list"},
        [{"gradeId": 1}, "junk"],
        {"gradeId": 1},
        "a string",
    ],
)
@pytest.mark.asyncio
async def test_wrong_shape_collection_is_server_error(body) -> None:
    """Test that a JSON collection of the wrong shape becomes ServerError."""
    backend = make_backend(GRADE, Recorder(httpx.Response(200, json=body)))
    with pytest.raises(ServerError, match="invalid body"):
        await backend.list_entities()


@pytest.mark.parametrize(
    "envelope",
    [
        [{"employee_Id": 1}],
        {"items": [], "totalCount": "many", "pageSize": 10},
        {"items": 3, "totalCount": 1, "pageSize": 10},
    ],
)
@pytest.mark.asyncio
async def test_wrong_shape_envelope_is_server_error(envelope) -> None:
    """Test that a paged envelope of the wrong shape becomes ServerError."""
    backend = make_backend(EMPLOYEE, Recorder(httpx.Response(200, json=envelope)))
    with pytest.raises(ServerError, match="invalid body"):
        await backend.list_entities(page=1, page_size=10)


@pytest.mark.asyncio
async def test_read_non_object_is_server_error() -> None:
    """Test that reading an entity answered with a JSON array becomes ServerError."""
    backend = make_backend(GRADE, Recorder(httpx.Response(200, json=[1, 2])))
    with pytest.raises(ServerError, match="invalid body"):
        await backend.read(1)


@pytest.mark.asyncio
async def test_create_client_normalizes_base_url() -> None:
    """Test that the shared client always has a trailing slash on its base URL."""
    async with create_client("http://portal.test/api", timeout=2.5) as client:
        assert str(client.base_url) == "http://portal.test/api/"
        assert client.timeout.read == 2.5


def test_create_client_requires_base_url() -> None:
    """Test that a base URL is required."""
    with pytest.raises(ValueError, match="base URL"):
        create_client("")
