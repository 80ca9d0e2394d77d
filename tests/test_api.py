import asyncio
import json
import os
import sys
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path
from types import SimpleNamespace

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep API tests deterministic: no model calls, no rate limiting.
os.environ.setdefault("LLM_ENABLED", "0")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from fastapi import Request  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.ai.providers.disabled_provider import DisabledProvider  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.profile_store import ProfileStore  # noqa: E402
from app.core.security import SessionUser, SignedSessionVerifier  # noqa: E402
from app.core.services import assemble_services  # noqa: E402
from app.main import create_app, rate_limit_handler  # noqa: E402
from app.services.match_scorer import FALLBACK_NOTE  # noqa: E402
from app.services.text_extraction import TextExtractor  # noqa: E402

RESUME_TEXT = (
    "Jane Doe | jane@example.com | github.com/jane\n"
    "Summary: backend developer with Python, SQL, Docker and React experience.\n"
    "Experience: Software developer at a fintech company, worked on payment APIs with the team.\n"
    "Education: BSc Computer Science, State University.\n"
    "Skills: Python, SQL, JavaScript, communication and leadership."
)
JOB_TEXT = "Python developer with SQL, AWS, Docker and TypeScript. Team communication matters."


def fixed_parser(text):
    def parse(content, cancel):
        return text

    return parse


def failing_parser(content, cancel):
    raise ValueError("broken pdf")


class ApiTestCase(unittest.TestCase):
    parser = staticmethod(fixed_parser(RESUME_TEXT))

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.store = ProfileStore(str(Path(self.tmpdir.name) / "profiles.db"))
        self.verifier = SignedSessionVerifier("api-test-secret")
        services = assemble_services(
            identity=self.verifier,
            store=self.store,
            llm=DisabledProvider(reason="tests"),
            settings=settings,
        )
        extractor = TextExtractor(max_size_bytes=1024 * 1024, timeout_s=2.0, parser=self.parser)
        self.services = replace(services, text_extractor=extractor, upload_extractor=extractor)
        self.app = create_app(services=self.services)

        token = self.verifier.issue(SessionUser(user_id="user-7", email="jane@example.com", display_name="Jane"))
        self.client = TestClient(self.app, cookies={settings.session_cookie_name: token})
        self.anonymous = TestClient(self.app)

    def tearDown(self):
        self.store.close()
        self.tmpdir.cleanup()


class PublicRoutesTests(ApiTestCase):
    def test_health(self):
        response = self.anonymous.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy"})

    def test_extract_text_without_session(self):
        response = self.anonymous.post(
            "/v1/resume/extract-text",
            files={"file": ("cv.pdf", b"%PDF-1.4 fake", "application/pdf")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["filename"], "cv.pdf")
        self.assertEqual(body["fileSize"], 13)
        self.assertTrue(body["text"].startswith("Jane Doe | jane@example.com"))

    def test_extract_text_rejects_wrong_type(self):
        response = self.anonymous.post(
            "/v1/resume/extract-text",
            files={"file": ("cv.txt", b"plain text", "text/plain")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "error": "Only PDF files are supported"})

    def test_extract_text_rejects_oversized_file(self):
        response = self.anonymous.post(
            "/v1/resume/extract-text",
            files={"file": ("cv.pdf", b"x" * (1024 * 1024 + 1), "application/pdf")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "File size must be less than 1MB")

    def test_extract_text_requires_file(self):
        response = self.anonymous.post("/v1/resume/extract-text")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "No file provided")


class ExtractFallbackTests(ApiTestCase):
    parser = staticmethod(failing_parser)

    def test_parse_failure_is_not_an_error_on_extract(self):
        response = self.anonymous.post(
            "/v1/resume/extract-text",
            files={"file": ("broken.pdf", b"x" * 2048, "application/pdf")},
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("broken.pdf", response.json()["text"])
        self.assertIn("File size: 2KB.", response.json()["text"])

    def test_parse_failure_rejects_upload(self):
        response = self.client.post(
            "/v1/resume/upload",
            files={"file": ("broken.pdf", b"x" * 2048, "application/pdf")},
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])


class AuthTests(ApiTestCase):
    def test_protected_routes_require_session(self):
        calls = [
            ("post", "/v1/match/analyze", {"json": {"resumeText": "a", "jobDescription": "b"}}),
            ("post", "/v1/cover-letter/generate", {"json": {}}),
            ("get", "/v1/user/profile", {}),
            ("post", "/v1/user/profile", {"json": {"bio": "x"}}),
            ("post", "/v1/user/resumes", {"json": {"name": "x"}}),
            ("delete", "/v1/user/resumes/r1", {}),
            ("post", "/v1/user/resumes/r1/default", {}),
            ("post", "/v1/user/analyses", {"json": {"jobTitle": "x", "score": 1}}),
            ("post", "/v1/resume/upload", {"files": {"file": ("cv.pdf", b"%PDF", "application/pdf")}}),
        ]
        for method, path, kwargs in calls:
            with self.subTest(path=path):
                response = getattr(self.anonymous, method)(path, **kwargs)
                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json(), {"success": False, "error": "Unauthorized"})

    def test_forged_cookie_is_rejected(self):
        forged = SignedSessionVerifier("wrong-secret").issue(SessionUser(user_id="user-7"))
        client = TestClient(self.app, cookies={settings.session_cookie_name: forged})
        self.assertEqual(client.get("/v1/user/profile").status_code, 401)


class ResumeUploadTests(ApiTestCase):
    def test_resume_is_accepted_with_validation(self):
        response = self.client.post(
            "/v1/resume/upload",
            files={"file": ("jane.pdf", b"%PDF-1.4 fake", "application/pdf")},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["validation"]["isResume"])
        self.assertEqual(body["validation"]["documentType"], "Resume/CV")
        self.assertEqual(body["filename"], "jane.pdf")
        self.assertIn("Software developer", body["resumeText"])


class NonResumeUploadTests(ApiTestCase):
    parser = staticmethod(fixed_parser("Chapter 2. Table of contents, figure 4, page 9, references and bibliography."))

    def test_non_resume_is_rejected(self):
        response = self.client.post(
            "/v1/resume/upload",
            files={"file": ("manual.pdf", b"%PDF-1.4 fake", "application/pdf")},
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertIn("does not appear to be a resume", body["error"])
        self.assertFalse(body["details"]["validation"]["isResume"])


class MatchApiTests(ApiTestCase):
    def test_fallback_analysis_contract(self):
        response = self.client.post(
            "/v1/match/analyze",
            json={"resumeText": RESUME_TEXT, "jobDescription": JOB_TEXT, "jobCategory": "Engineering"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertFalse(body["tracked"])
        analysis = body["analysis"]
        self.assertEqual(analysis["note"], FALLBACK_NOTE)
        self.assertEqual(
            set(analysis["scores"]),
            {"technicalSkills", "experienceMatch", "keywordAlignment", "softSkills"},
        )
        self.assertTrue(0 <= analysis["overallMatch"] <= 100)
        self.assertIn("aws", analysis["missingKeywords"])

    def test_missing_text_is_rejected(self):
        response = self.client.post("/v1/match/analyze", json={"resumeText": "  ", "jobDescription": JOB_TEXT})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Resume text and job description are required")

    def test_job_title_tracks_into_profile(self):
        self.client.get("/v1/user/profile")
        response = self.client.post(
            "/v1/match/analyze",
            json={
                "resumeText": RESUME_TEXT,
                "jobDescription": JOB_TEXT,
                "jobTitle": "Backend Engineer",
                "companyName": "Acme",
            },
        )
        self.assertTrue(response.json()["tracked"])

        stats = self.client.get("/v1/user/profile").json()["profile"]["stats"]
        self.assertEqual(stats["totalAnalyses"], 1)
        record = stats["analysesHistory"][0]
        self.assertEqual(record["jobTitle"], "Backend Engineer")
        self.assertEqual(record["companyName"], "Acme")
        self.assertEqual(record["score"], response.json()["analysis"]["overallMatch"])

    def test_tracking_failure_does_not_fail_analysis(self):
        # no profile exists yet, so tracking reports not found
        response = self.client.post(
            "/v1/match/analyze",
            json={"resumeText": RESUME_TEXT, "jobDescription": JOB_TEXT, "jobTitle": "Backend Engineer"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["tracked"])


class CoverLetterApiTests(ApiTestCase):
    def test_template_letter_uses_session_name(self):
        response = self.client.post(
            "/v1/cover-letter/generate",
            json={
                "resumeText": RESUME_TEXT,
                "jobDescription": JOB_TEXT,
                "jobTitle": "Backend Engineer",
                "companyName": "Acme",
            },
        )
        self.assertEqual(response.status_code, 200)
        letter = response.json()["coverLetter"]
        self.assertTrue(letter["coverLetter"].endswith("Sincerely,\nJane"))
        self.assertIn("opening", letter["sections"])
        self.assertIn("note", letter)

    def test_missing_fields_are_rejected(self):
        response = self.client.post(
            "/v1/cover-letter/generate",
            json={"resumeText": RESUME_TEXT, "jobDescription": JOB_TEXT},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["error"],
            "Resume text, job description, job title, and company name are required",
        )

    def test_unknown_tone_lists_the_constraint(self):
        response = self.client.post(
            "/v1/cover-letter/generate",
            json={
                "resumeText": RESUME_TEXT,
                "jobDescription": JOB_TEXT,
                "jobTitle": "Engineer",
                "companyName": "Acme",
                "tone": "sarcastic",
            },
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertIn("tone", body["error"])


class ProfileApiTests(ApiTestCase):
    def test_profile_is_created_on_first_read(self):
        response = self.client.get("/v1/user/profile")
        self.assertEqual(response.status_code, 200)
        profile = response.json()["profile"]
        self.assertEqual(profile["userId"], "user-7")
        self.assertEqual(profile["displayName"], "Jane")
        self.assertEqual(profile["photoURL"], "")
        self.assertEqual(profile["stats"]["improvementTrend"], "not-enough-data")

    def test_update_profile(self):
        self.client.get("/v1/user/profile")
        response = self.client.post(
            "/v1/user/profile",
            json={"targetRole": "Staff Engineer", "preferences": {"jobAlerts": False}},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "message": "Profile updated successfully"})

        profile = self.client.get("/v1/user/profile").json()["profile"]
        self.assertEqual(profile["targetRole"], "Staff Engineer")
        self.assertFalse(profile["preferences"]["jobAlerts"])
        self.assertEqual(profile["preferences"]["theme"], "dark")

    def test_update_rejects_empty_and_unknown_fields(self):
        self.client.get("/v1/user/profile")
        self.assertEqual(self.client.post("/v1/user/profile", json={}).status_code, 400)
        response = self.client.post("/v1/user/profile", json={"stats": {"totalAnalyses": 99}})
        self.assertEqual(response.status_code, 400)
        self.assertIn("stats", response.json()["error"])

    def test_resume_lifecycle(self):
        self.client.get("/v1/user/profile")
        first = self.client.post("/v1/user/resumes", json={"name": "Main", "content": RESUME_TEXT})
        self.assertEqual(first.status_code, 200)
        first_id = first.json()["resumeId"]
        second_id = self.client.post(
            "/v1/user/resumes",
            json={"name": "Alt", "content": RESUME_TEXT, "fileName": "alt.pdf", "fileSize": 2048},
        ).json()["resumeId"]

        resumes = self.client.get("/v1/user/profile").json()["profile"]["savedResumes"]
        self.assertEqual([item["isDefault"] for item in resumes], [True, False])

        self.assertEqual(self.client.post(f"/v1/user/resumes/{second_id}/default").json(), {"success": True})
        self.assertEqual(self.client.delete(f"/v1/user/resumes/{second_id}").json(), {"success": True})
        profile = self.client.get("/v1/user/profile").json()["profile"]
        self.assertEqual(profile["defaultResumeId"], first_id)

        missing = self.client.delete("/v1/user/resumes/nope")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json(), {"success": False, "error": "Resume not found"})

    def test_short_resume_is_rejected(self):
        self.client.get("/v1/user/profile")
        response = self.client.post("/v1/user/resumes", json={"name": "Tiny", "content": "too short"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Resume content is too short or incomplete")

    def test_track_analysis(self):
        self.assertEqual(
            self.client.post("/v1/user/analyses", json={"jobTitle": "Engineer", "score": 70}).status_code,
            404,
        )
        self.client.get("/v1/user/profile")
        for score in (50, 60, 70):
            response = self.client.post(
                "/v1/user/analyses",
                json={"jobTitle": "Engineer", "score": score, "strengths": ["Python"]},
            )
        stats = response.json()["stats"]
        self.assertEqual(stats["totalAnalyses"], 3)
        self.assertEqual(stats["averageMatchScore"], 60.0)
        self.assertEqual(stats["improvementTrend"], "improving")
        self.assertEqual(stats["topStrengths"], ["Python"])

    def test_score_out_of_range_is_rejected(self):
        self.client.get("/v1/user/profile")
        response = self.client.post("/v1/user/analyses", json={"jobTitle": "Engineer", "score": 101})
        self.assertEqual(response.status_code, 400)
        self.assertIn("score", response.json()["error"])


class UnexpectedErrorTests(ApiTestCase):
    def test_unhandled_exception_becomes_generic_500(self):
        class ExplodingScorer:
            async def analyze(self, *args, **kwargs):
                raise RuntimeError("secret internals")

        self.app.state.services = replace(self.services, scorer=ExplodingScorer())
        client = TestClient(
            self.app,
            cookies={settings.session_cookie_name: self.verifier.issue(SessionUser(user_id="user-7"))},
            raise_server_exceptions=False,
        )
        response = client.post("/v1/match/analyze", json={"resumeText": "a", "jobDescription": "b"})
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertNotIn("secret", body["error"])


class RateLimitResponseTests(ApiTestCase):
    def test_exceeded_limit_uses_error_body(self):
        request = Request(
            {
                "type": "http",
                "app": self.app,
                "method": "POST",
                "scheme": "http",
                "server": ("testserver", 80),
                "path": "/v1/match/analyze",
                "query_string": b"",
                "headers": [],
            }
        )
        exc = SimpleNamespace(detail="10 per 1 minute")

        response = asyncio.run(rate_limit_handler(request, exc))

        self.assertEqual(response.status_code, 429)
        self.assertEqual(
            json.loads(response.body),
            {"success": False, "error": "Rate limit exceeded: 10 per 1 minute"},
        )


if __name__ == "__main__":
    unittest.main()
