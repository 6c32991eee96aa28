from __future__ import annotations

import random
from typing import Dict, List, Sequence

from quizgate.schemas import PublicQuestion, Question, QuestionId, QuizResult, SubmittedAnswer


def sample_questions(bank: Sequence[Question], n: int, rng: random.Random) -> List[PublicQuestion]:
    """
    Uniformly shuffle a copy of the bank and return the first `n` questions
    with the answer key stripped. A bank smaller than `n` comes back whole.
    """
    pool = list(bank)
    rng.shuffle(pool)
    return [PublicQuestion(id=q.id, question=q.question, options=q.options) for q in pool[:n]]


def _index_by_id(bank: Sequence[Question]) -> Dict[QuestionId, Question]:
    index: Dict[QuestionId, Question] = {}
    for q in bank:
        # first occurrence wins, like a linear search would
        index.setdefault(q.id, q)
    return index


def score_answers(bank: Sequence[Question], answers: Sequence[SubmittedAnswer], threshold: int) -> QuizResult:
    """
    Count answers whose choice matches the bank's answer key.

    Unknown ids score nothing; repeated ids are each scored. The result
    carries no token, that is the issuer's job once `passed` is known.
    """
    index = _index_by_id(bank)
    score = 0
    for ans in answers:
        q = index.get(ans.id)
        if q is not None and q.answer == ans.choice:
            score += 1
    return QuizResult(score=score, passed=score >= threshold)
