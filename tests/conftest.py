import json

import pytest
import requests

from scripts.orgmigrate.client import GitHubClient
from scripts.orgmigrate.config import MigrationConfig, OrgConfig
from scripts.orgmigrate.rate_limiter import RateLimiter

API = "https://api.github.com"


def make_response(payload=None, status=200, url=API, headers=None):
    """Build a real requests.Response carrying a JSON payload."""
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.reason = "OK" if status < 400 else "Error"
    resp.encoding = "utf-8"
    resp._content = b"" if payload is None else json.dumps(payload).encode("utf-8")
    resp.headers.update(headers or {})
    return resp


def link_header(next_url, last_url):
    return {"Link": f'<{next_url}>; rel="next", <{last_url}>; rel="last"'}


def graph_page(items, has_next, cursor=None):
    """Three levels down: data.organization.things carries the connection."""
    return {
        "data": {
            "organization": {
                "things": {
                    "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
                    "nodes": items,
                }
            }
        }
    }


@pytest.fixture
def org_config():
    return OrgConfig(org="src-org", token="t0ken")


@pytest.fixture
def config(org_config):
    return MigrationConfig(
        source=org_config,
        dest=OrgConfig(org="dst-org", token="t1ken"),
    )


@pytest.fixture
def limiter(mocker):
    return mocker.Mock(spec=RateLimiter)


@pytest.fixture
def client(org_config, limiter):
    return GitHubClient(org_config, limiter=limiter, rest_max_pages=10, graph_max_pages=10)


@pytest.fixture
def session_request(mocker, client):
    """Patch the client's HTTP session; set side_effect to a list of responses."""
    return mocker.patch.object(client._session, "request")
