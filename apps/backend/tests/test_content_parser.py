"""
Tests for the content parser: plugin short-circuit, LLM fallback and validation.
"""
import pytest

from core.errors import ExtractionError, JsonParseError
from pipeline.extractor import (
    TRUNCATION_MARKER,
    JobContentParser,
    html_to_text,
    parse_job_content,
    truncate,
)


class TestPluginShortCircuit:

    @pytest.mark.asyncio
    async def test_json_ld_page_skips_llm(self, fake_llm, schema_org_html):
        llm = fake_llm({"title": "Wrong", "company": "Wrong"})
        parser = JobContentParser(llm)

        data = await parser.parse_job_content(schema_org_html, url="https://acme.example/jobs/1")

        assert llm.calls == []
        assert data.title == "Senior Engineer"
        assert data.company == "Acme Co"
        assert data.job_type == "full-time"
        assert data.location == "Auckland, NZ"
        assert data.salary_min == 140000
        assert data.salary_max == 170000
        assert data.salary_currency == "NZD"
        assert data.posted_date == "2025-01-10"
        assert data.deadline == "2025-02-28"
        assert data.source == "schema_org"
        assert data.original_content == schema_org_html

    @pytest.mark.asyncio
    async def test_json_ld_page_parses_without_llm_configured(self, schema_org_html):
        data = await JobContentParser(None).parse_job_content(schema_org_html)

        assert data.company == "Acme Co"

    @pytest.mark.asyncio
    async def test_page_title_match_still_calls_llm(self, fake_llm, plain_html, llm_job_payload):
        llm = fake_llm(llm_job_payload)

        data = await JobContentParser(llm).parse_job_content(plain_html)

        assert len(llm.calls) == 1
        assert data.company == "Kiwi Software Ltd"
        assert data.source == "llm"


class TestLlmFallback:

    @pytest.mark.asyncio
    async def test_plain_html_uses_llm_once(self, fake_llm, plain_html, llm_job_payload):
        llm = fake_llm(llm_job_payload)

        data = await JobContentParser(llm).parse_job_content(plain_html, url="https://example.com/careers/1")

        assert len(llm.calls) == 1
        assert data.is_viable()
        assert data.title == "Backend Developer"
        assert data.salary_min == 90000
        assert data.salary_currency == "NZD"
        assert data.original_content == plain_html

    @pytest.mark.asyncio
    async def test_prompt_is_stripped_text_at_low_temperature(self, fake_llm, plain_html, llm_job_payload):
        llm = fake_llm(llm_job_payload)

        await JobContentParser(llm).parse_job_content(plain_html, language='en')

        call = llm.calls[0]
        prompt = call['messages'][-1]['content']
        assert call['temperature'] == 0.1
        assert "window.tracking" not in prompt
        assert "color: red" not in prompt
        assert "Kiwi Software Ltd is hiring in Wellington." in prompt
        assert "in English" in prompt

    @pytest.mark.asyncio
    async def test_default_language_is_chinese(self, fake_llm, plain_html, llm_job_payload):
        llm = fake_llm(llm_job_payload)

        await JobContentParser(llm).parse_job_content(plain_html)

        assert "Simplified Chinese" in llm.calls[0]['messages'][-1]['content']

    @pytest.mark.asyncio
    async def test_fenced_model_output_is_recovered(self, fake_llm, plain_html):
        llm = fake_llm('```json\n{"title": "Backend Developer", "company": "Kiwi Software Ltd",}\n```')

        data = await JobContentParser(llm).parse_job_content(plain_html)

        assert data.company == "Kiwi Software Ltd"

    @pytest.mark.asyncio
    async def test_plain_text_content(self, fake_llm, llm_job_payload):
        llm = fake_llm(llm_job_payload)

        data = await JobContentParser(llm).parse_job_content("Backend Developer at Kiwi Software Ltd, Wellington")

        assert data.title == "Backend Developer"
        assert "Backend Developer at Kiwi Software Ltd" in llm.calls[0]['messages'][-1]['content']

    @pytest.mark.asyncio
    async def test_long_content_is_truncated(self, fake_llm, llm_job_payload):
        llm = fake_llm(llm_job_payload)
        parser = JobContentParser(llm, max_content_chars=100)

        await parser.parse_job_content("word " * 500)

        assert TRUNCATION_MARKER in llm.calls[0]['messages'][-1]['content']

    @pytest.mark.asyncio
    async def test_module_level_wrapper(self, fake_llm, plain_html, llm_job_payload):
        data = await parse_job_content(plain_html, fake_llm(llm_job_payload))

        assert data.title == "Backend Developer"


class TestFailures:

    @pytest.mark.asyncio
    async def test_empty_content(self, fake_llm):
        with pytest.raises(ExtractionError) as exc_info:
            await JobContentParser(fake_llm({})).parse_job_content("   ")

        assert exc_info.value.stage == "input"

    @pytest.mark.asyncio
    async def test_missing_company_fails_validation(self, fake_llm, plain_html):
        llm = fake_llm({"title": "Backend Developer", "company": None, "location": "Wellington"})

        with pytest.raises(ExtractionError) as exc_info:
            await JobContentParser(llm).parse_job_content(plain_html)

        error = exc_info.value
        assert error.stage == "validation"
        assert error.partial_data['title'] == "Backend Developer"
        assert error.partial_data['location'] == "Wellington"

    @pytest.mark.asyncio
    async def test_malformed_model_output(self, fake_llm, plain_html):
        llm = fake_llm("Sorry, I cannot help with that request.")

        with pytest.raises(ExtractionError) as exc_info:
            await JobContentParser(llm).parse_job_content(plain_html)

        error = exc_info.value
        assert error.stage == "llm_json"
        assert isinstance(error.__cause__, JsonParseError)
        # page title plugin result is carried as partial data
        assert error.partial_data['title'] == "Careers - Backend Developer"

    @pytest.mark.asyncio
    async def test_model_returns_array(self, fake_llm, plain_html):
        llm = fake_llm('[{"title": "Backend Developer"}]')

        with pytest.raises(ExtractionError) as exc_info:
            await JobContentParser(llm).parse_job_content(plain_html)

        assert exc_info.value.stage == "llm_json"

    @pytest.mark.asyncio
    async def test_llm_not_configured(self, fake_llm, plain_html):
        llm = fake_llm({}, enabled=False)

        with pytest.raises(ExtractionError) as exc_info:
            await JobContentParser(llm).parse_job_content(plain_html)

        assert exc_info.value.stage == "llm_unavailable"
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_llm_call_error(self, failing_llm, plain_html):
        with pytest.raises(ExtractionError) as exc_info:
            await JobContentParser(failing_llm).parse_job_content(plain_html)

        assert exc_info.value.stage == "llm_call"
        assert "503" in str(exc_info.value)


def test_html_to_text_drops_scripts(plain_html):
    text = html_to_text(plain_html)

    assert "window.tracking" not in text
    assert "Salary: $90,000 - $120,000" in text


def test_truncate_keeps_short_text():
    assert truncate("short", 10) == "short"
    assert truncate("x" * 20, 10) == "x" * 10 + TRUNCATION_MARKER
