"""
Tests for the import API routes.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

import main
from app.job_import import InMemoryJobRepository, JobImportService
from core.errors import ExtractionError, FetchError
from pipeline.extractor import JobContentParser
from pipeline.models import ParsedJobData


class FakeResolver:
    def __init__(self, outcome):
        self.outcome = outcome

    async def parse_job_from_url(self, url, scraper_url=None):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome.with_application_url(url)


def seed(repository, data):
    return asyncio.run(repository.save(data, "user-1"))


@pytest.fixture
def install_service(fake_llm, llm_job_payload):
    def _install(outcome=None, repository=None):
        outcome = outcome or ParsedJobData(title="Chef", company="Cafe")
        service = JobImportService(
            JobContentParser(fake_llm(llm_job_payload)),
            FakeResolver(outcome),
            repository=repository or InMemoryJobRepository()
        )
        main.app.state.import_service = service
        return service

    yield _install
    main.app.state.import_service = None


@pytest.fixture
def client():
    return TestClient(main.app)


def test_import_single_url(client, install_service):
    install_service()

    response = client.post("/api/jobs/import", json={"url": "https://jobs.example/1"})

    assert response.status_code == 200
    body = response.json()
    assert body['success'] is True
    assert body['results'][0]['parsed_data']['title'] == "Chef"
    assert body['summary'] == "Imported 1 jobs, failed 0."


def test_import_empty_body_is_400(client, install_service):
    install_service()

    response = client.post("/api/jobs/import", json={})

    assert response.status_code == 400
    assert response.json()['detail'] == "Please provide a URL or job content"


def test_import_failure_is_reported_per_item(client, install_service):
    install_service(outcome=FetchError("Worker returned 500: Scraping failed: timeout"))

    response = client.post("/api/jobs/import", json={"urls": ["https://jobs.example/1"], "content": "Backend Developer"})

    body = response.json()
    assert response.status_code == 200
    assert [r['success'] for r in body['results']] == [False, True]
    assert "Scraping failed" in body['results'][0]['error']


def test_import_without_service_is_503(client):
    main.app.state.import_service = None

    response = client.post("/api/jobs/import", json={"url": "https://jobs.example/1"})

    assert response.status_code == 503


class TestRescrapeRoute:

    def test_requires_user(self, client, install_service):
        install_service()

        assert client.post("/api/jobs/abc/rescrape").status_code == 401

    def test_unknown_job_is_404(self, client, install_service):
        install_service()

        response = client.post("/api/jobs/missing/rescrape", headers={"X-User-Id": "user-1"})

        assert response.status_code == 404

    def test_rescrape_success(self, client, install_service):
        repository = InMemoryJobRepository()
        install_service(outcome=ParsedJobData(title="Head Chef", company="Cafe"), repository=repository)
        job_id = seed(repository, ParsedJobData(title="Chef", company="Cafe", application_url="https://jobs.example/9"))

        response = client.post(f"/api/jobs/{job_id}/rescrape", headers={"X-User-Id": "user-1"})

        assert response.status_code == 200
        assert response.json()['title'] == "Head Chef"

    def test_fetch_failure_is_502(self, client, install_service):
        repository = InMemoryJobRepository()
        install_service(outcome=FetchError("Failed to fetch URL: 404"), repository=repository)
        job_id = seed(repository, ParsedJobData(title="Chef", company="Cafe", application_url="https://jobs.example/9"))

        response = client.post(f"/api/jobs/{job_id}/rescrape", headers={"X-User-Id": "user-1"})

        assert response.status_code == 502
        assert response.json()['detail'].startswith("fetch failed:")

    def test_extraction_failure_is_422_with_partial_data(self, client, install_service):
        repository = InMemoryJobRepository()
        error = ExtractionError("AI returned invalid JSON", stage="llm_json", partial_data={"title": "Chef"})
        install_service(outcome=error, repository=repository)
        job_id = seed(repository, ParsedJobData(title="Chef", company="Cafe", application_url="https://jobs.example/9"))

        response = client.post(f"/api/jobs/{job_id}/rescrape", headers={"X-User-Id": "user-1"})

        assert response.status_code == 422
        assert response.json() == {
            "error": "extraction failed (llm_json): AI returned invalid JSON",
            "parsed_data": {"title": "Chef"},
        }


class TestCapabilities:

    def test_healthz_green_with_llm(self, client, monkeypatch):
        monkeypatch.setenv("LLM_API_KEY", "sk-test")
        monkeypatch.delenv("SCRAPER_API_URL", raising=False)

        body = client.get("/api/healthz").json()

        assert body == {"status": "green", "components": {"ai": True, "worker": False}}

    def test_healthz_amber_without_llm(self, client, monkeypatch):
        monkeypatch.delenv("LLM_API_KEY", raising=False)
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)

        assert client.get("/api/healthz").json()['status'] == "amber"

    def test_capabilities(self, client, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
        monkeypatch.setenv("SCRAPER_API_URL", "https://scraper.example.net/")
        monkeypatch.setenv("SCRAPER_LOCAL_FALLBACK", "true")

        assert client.get("/api/capabilities").json() == {
            "ai_extraction": True,
            "worker_delegation": True,
            "local_fallback": True,
        }

    def test_env_presence_hidden_outside_dev(self, client, monkeypatch):
        monkeypatch.delenv("JOBPARSE_ENV", raising=False)

        assert client.get("/admin/config/env").status_code == 403

    def test_env_presence_in_dev(self, client, monkeypatch):
        monkeypatch.setenv("JOBPARSE_ENV", "dev")
        monkeypatch.setenv("LLM_API_KEY", "sk-test")

        body = client.get("/admin/config/env").json()

        assert body["LLM_API_KEY"] is True
        assert "sk-test" not in str(body)
