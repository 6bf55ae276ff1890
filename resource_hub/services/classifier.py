"""Relevance classifier backed by an OpenAI-compatible chat completions API.

The classifier is an external oracle: it receives a text excerpt and a
filename and returns a ``Verdict``. Every failure mode is reported as
``ClassifierUnavailable`` so callers only ever see a verdict or one error.
"""

import json
import logging
from time import monotonic
from typing import List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ClassifierUnavailable

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n...(truncated)"

SYSTEM_PROMPT = """You are an AI content analyzer that determines if documents are study-related or educational materials.

Analyze the provided content and determine:
1. Is this study-related? (educational materials, textbooks, research papers, assignments, course materials, lab manuals, question papers, study guides, etc.)
2. Confidence level (0-100)
3. Brief summary of content
4. Relevant categories if study-related
5. Reasoning for your decision

Study-related content includes:
- Academic papers and research
- Textbooks and educational materials
- Course syllabi and curricula
- Assignments and homework
- Lab manuals and experiments
- Question papers and exams
- Study guides and notes
- Educational presentations

Non-study-related content includes:
- Personal documents
- Business documents
- Entertainment content
- Random text or spam
- Marketing materials
- Legal documents (unless academic law materials)

Respond in JSON format only:
{
  "isStudyRelated": boolean,
  "confidence": number,
  "summary": "brief summary",
  "categories": ["category1", "category2"],
  "reasoning": "explanation for decision"
}"""


class Verdict(BaseModel):
    # strict: a "yes" or "85" string is not a verdict
    model_config = ConfigDict(populate_by_name=True, frozen=True, strict=True)

    is_study_related: bool = Field(alias="isStudyRelated")
    confidence: float = Field(ge=0, le=100)
    summary: str
    categories: List[str]
    reasoning: str

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def truncate_excerpt(text: str, char_budget: int) -> str:
    if len(text) <= char_budget:
        return text
    return text[:char_budget] + TRUNCATION_MARKER


class RelevanceClassifier:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        char_budget: int = 8000,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.char_budget = char_budget
        self.session = session or requests.Session()

    def classify(self, excerpt: str, filename: str) -> Verdict:
        """Classify an excerpt in a single attempt.

        ``timeout`` bounds the whole call: it is passed to requests as the
        connect and per-read limit, and the streamed body is also checked
        against an overall deadline so a slow trickle cannot outlast it.
        """
        if not self.api_key:
            raise ClassifierUnavailable("Classifier API key not configured")

        content = truncate_excerpt(excerpt, self.char_budget)
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": (
                        "Analyze this PDF content:\n\n"
                        f"Filename: {filename}\n\n"
                        f"Content:\n{content}"
                    ),
                },
            ],
            "max_tokens": 1000,
            "temperature": 0.1,
            "response_format": {"type": "json_object"},
        }

        deadline = monotonic() + self.timeout
        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=(self.timeout, self.timeout),
                stream=True,
            )
        except requests.exceptions.RequestException as e:
            raise ClassifierUnavailable(f"Classifier request failed: {e}") from e

        try:
            if not response.ok:
                raise ClassifierUnavailable(
                    f"Classifier returned HTTP {response.status_code}"
                )
            body = self._read_body(response, deadline)
        finally:
            response.close()

        try:
            message = json.loads(body)["choices"][0]["message"]["content"]
            verdict = Verdict.model_validate(json.loads(message))
        except (ValueError, KeyError, IndexError, TypeError, ValidationError) as e:
            raise ClassifierUnavailable(
                f"Malformed classifier response: {e}"
            ) from e

        logger.info(
            "Classified %s: study_related=%s confidence=%s",
            filename,
            verdict.is_study_related,
            verdict.confidence,
        )
        return verdict

    def _read_body(self, response, deadline: float) -> bytes:
        body = bytearray()
        try:
            for chunk in response.iter_content(chunk_size=8192):
                body += chunk
                if monotonic() > deadline:
                    raise ClassifierUnavailable(
                        f"Classifier response exceeded {self.timeout}s"
                    )
        except requests.exceptions.RequestException as e:
            raise ClassifierUnavailable(f"Classifier read failed: {e}") from e
        return bytes(body)
