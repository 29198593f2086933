"""
Question bank loader.

Reads the JSON produced by the question parser: a list of objects with
``id``, ``text``, ``options`` (``letter``/``text`` pairs),
``correct_answers`` and optional ``is_multi_select``, ``topic`` and
``explanation``. camelCase keys (``correctAnswers``, ``isMultiSelect``)
are accepted as well.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from netquiz.core.models import Question, QuestionOption
from netquiz.core.topics import classify_topic


def question_from_dict(data: dict[str, Any]) -> Question:
    correct = data.get("correct_answers", data.get("correctAnswers", ()))
    if isinstance(correct, str):
        correct = [correct]
    correct_answers = frozenset(letter.strip().upper() for letter in correct)

    multi = data.get("is_multi_select", data.get("isMultiSelect"))
    text = str(data["text"]).strip()

    return Question(
        id=str(data["id"]),
        text=text,
        options=tuple(
            QuestionOption(letter=str(o["letter"]).strip().upper(), text=str(o["text"]))
            for o in data.get("options", ())
        ),
        correct_answers=correct_answers,
        is_multi_select=bool(multi) if multi is not None else len(correct_answers) > 1,
        topic=data.get("topic") or classify_topic(text),
        explanation=data.get("explanation", "") or "",
    )


def load_questions(path: Path | str) -> list[Question]:
    """
    Load a question bank in file order.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a JSON list of question objects
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Question bank not found: {path}")

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("questions", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of questions in {path}")

    questions = []
    seen: set[str] = set()
    for i, raw in enumerate(data):
        try:
            question = question_from_dict(raw)
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed question #{i + 1} in {path}: {e}") from e
        if question.id in seen:
            logger.warning(f"Duplicate question id {question.id} in {path}, keeping the first")
            continue
        seen.add(question.id)
        questions.append(question)

    logger.debug(f"Loaded {len(questions)} questions from {path}")
    return questions
