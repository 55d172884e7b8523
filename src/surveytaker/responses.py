"""
Response Store and validation.

The store maps question id -> Answer and is immutable: every edit returns
a new store, so state snapshots holding a store never change under a
subscriber's feet.

Validation rule (identical for the per-step check and the submit check):
    - required scalar question: value non-empty after trimming
    - required multi-select question: at least one selected value
    - anything else: always satisfied
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from surveytaker.model import Answer, Question


class ResponseStore(Mapping[str, Answer]):
    """Immutable question id -> Answer mapping, in question order."""

    def __init__(self, answers: Optional[Mapping[str, Answer]] = None):
        self._answers: Dict[str, Answer] = dict(answers or {})

    @classmethod
    def initialize(cls, questions: Iterable[Question]) -> "ResponseStore":
        """One empty answer per question."""
        return cls({q.id: Answer(question_id=q.id) for q in questions})

    def __getitem__(self, question_id: str) -> Answer:
        return self._answers[question_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    def __repr__(self) -> str:
        return f"ResponseStore({list(self._answers.values())!r})"

    def answer_for(self, question_id: str) -> Answer:
        return self._answers.get(question_id) or Answer(question_id=question_id)

    def _with(self, answer: Answer) -> "ResponseStore":
        answers = dict(self._answers)
        answers[answer.question_id] = answer
        return ResponseStore(answers)

    def set_scalar(self, question_id: str, value: Optional[str]) -> "ResponseStore":
        """Overwrite the scalar answer of a question."""
        current = self.answer_for(question_id)
        return self._with(Answer(question_id, value or "", current.selected))

    def toggle_choice(self, question_id: str, value: str, checked: bool) -> "ResponseStore":
        """Add or remove a value from a multi-select answer."""
        current = self.answer_for(question_id)
        if checked:
            if value in current.selected:
                return self
            selected = current.selected + (value,)
        else:
            selected = tuple(v for v in current.selected if v != value)
        return self._with(Answer(question_id, current.value, selected))

    def is_satisfied(self, question: Question) -> bool:
        if not question.required:
            return True
        answer = self.answer_for(question.id)
        if question.question_type.is_multi_select:
            return len(answer.selected) > 0
        return bool(answer.value.strip())

    def first_unsatisfied(self, questions: Iterable[Question]) -> Optional[Question]:
        for question in questions:
            if not self.is_satisfied(question):
                return question
        return None

    def non_empty(self) -> List[Answer]:
        return [a for a in self._answers.values() if not a.is_empty]


def missing_answer_message(question: Question) -> str:
    return f"Please answer question {question.order_number}: {question.text}"


__all__ = ["ResponseStore", "missing_answer_message"]
