"""Quiz question generation.

Questions come in four types with a target mix of 40% multiple choice,
20% true/false, 30% short answer and 10% fill in the blank.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from summaryr.config.app_config import load_app_config
from summaryr.core.generation import GenerationError, extract_items, resolve_client, split_text
from summaryr.core.study_sources import load_study_source
from summaryr.db.database import SourceKind
from summaryr.db.study_repository import QuestionRecord, replace_questions
from summaryr.llm.client import LLMClient, LLMError

logger = structlog.get_logger(__name__)

QuestionType = Literal["mcq", "true_false", "short_answer", "fill_blank"]
QUESTION_TYPES = ("mcq", "true_false", "short_answer", "fill_blank")

SYSTEM_PROMPT_QUESTIONS = (
    "You are an educational assistant that creates high-quality questions from "
    "transcripts.{language_rule} Always return a valid JSON object with a "
    '"questions" array.'
)

USER_PROMPT_QUESTIONS = """Create {count} diverse educational questions from the following transcript.
Generate a mix of question types:
- Multiple Choice Questions (MCQ): 40%
- True/False: 20%
- Short Answer: 30%
- Fill in the Blank: 10%

For each question:
- type: one of "mcq", "true_false", "short_answer", "fill_blank"
- question: the question text
- options: array of options (only for MCQ, 4 options)
- correct_answer: the correct answer
- explanation: brief explanation (optional but recommended)

Format your response as a JSON object with a "questions" array.
Example:
{{"questions": [
  {{
    "type": "mcq",
    "question": "What is X?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correct_answer": "Option A",
    "explanation": "X is..."
  }},
  {{
    "type": "true_false",
    "question": "Y is always true.",
    "correct_answer": "False",
    "explanation": "Y can be false because..."
  }}
]}}

Transcript:
{content}{language_instruction}

Return ONLY the JSON, no additional text."""

LANGUAGE_INSTRUCTION = (
    "\n\nIMPORTANT: Respond in the same language as the transcript (language code: "
    "{language}). All questions, options, answers, and explanations should be in "
    "that language."
)


@dataclass
class Question:
    type: QuestionType
    question: str
    correct_answer: str
    options: list[str] | None = None
    explanation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "question": self.question,
            "options": self.options,
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
        }


@dataclass
class QuestionBatch:
    questions: list[Question] = field(default_factory=list)
    dropped: int = 0


def build_prompts(content: str, count: int, language: str) -> tuple[str, str]:
    """System and user prompts for a question request."""
    if language != "en":
        language_rule = (
            " Always respond in the same language as the transcript "
            f"(language code: {language})."
        )
        language_instruction = LANGUAGE_INSTRUCTION.format(language=language)
    else:
        language_rule = ""
        language_instruction = ""

    system = SYSTEM_PROMPT_QUESTIONS.format(language_rule=language_rule)
    user = USER_PROMPT_QUESTIONS.format(
        count=count,
        content=content,
        language_instruction=language_instruction,
    )
    return system, user


def _parse_questions(raw: Any) -> QuestionBatch:
    batch = QuestionBatch()

    for item in extract_items(raw, "questions"):
        if not isinstance(item, dict):
            batch.dropped += 1
            continue

        q_type = str(item.get("type") or "").strip().lower()
        text = str(item.get("question") or "").strip()
        answer = item.get("correct_answer")
        if q_type not in QUESTION_TYPES or not text or answer is None:
            batch.dropped += 1
            continue

        options = item.get("options")
        if q_type == "mcq":
            if not isinstance(options, list) or len(options) < 2:
                batch.dropped += 1
                continue
            options = [str(option) for option in options]
        else:
            options = None

        # Models sometimes emit booleans for true/false answers
        if isinstance(answer, bool):
            answer = "True" if answer else "False"

        batch.questions.append(
            Question(
                type=q_type,  # type: ignore[arg-type]
                question=text,
                correct_answer=str(answer).strip(),
                options=options,
                explanation=item.get("explanation") or None,
            )
        )

    if batch.dropped:
        logger.warning("questions_dropped", dropped=batch.dropped)
    return batch


def generate_questions(
    texts: list[str],
    client: LLMClient,
    count: int = 20,
    language: str = "en",
) -> list[Question]:
    """Ask the model for count questions about the given texts.

    Raises:
        GenerationError: If the model call fails or returns invalid JSON
    """
    system, user = build_prompts("\n\n".join(texts), count, language)

    try:
        raw = client.simple_json(system_prompt=system, user_message=user, temperature=0.7)
    except LLMError as e:
        logger.error("question_generation_failed", error=str(e))
        raise GenerationError(f"Question generation failed: {e}") from e

    batch = _parse_questions(raw)
    logger.info("questions_generated", count=len(batch.questions), language=language)
    return batch.questions


def generate_questions_for_source(
    kind: SourceKind,
    source_id: str,
    user_id: str,
    count: int | None = None,
    client: LLMClient | None = None,
) -> list[QuestionRecord]:
    """Generate and store a fresh question set for a video or document.

    Raises:
        NotFoundError, NotReadyError: If the source cannot be used
        GenerationError: If generation fails
        ValueError: If count is not positive
    """
    settings = load_app_config().processing
    if count is None:
        count = settings.default_question_count
    if count <= 0:
        raise ValueError("count must be positive")

    source = load_study_source(kind, source_id, user_id)
    client = resolve_client(client)

    if kind == "video":
        questions = generate_questions(source.texts, client, count, source.language)
    else:
        questions = []
        for chunk in split_text(source.full_text, settings.generation_chunk_size):
            questions.extend(generate_questions([chunk], client, count, source.language))
            if len(questions) >= count:
                break

    questions = questions[:count]
    if not questions:
        raise GenerationError("No questions were generated")

    return replace_questions(kind, source_id, user_id, [q.to_dict() for q in questions])
