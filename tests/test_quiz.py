import random
import unittest
from collections import Counter

from pydantic import ValidationError

from quizgate.schemas import Question, SubmittedAnswer
from quizgate.services.quiz import sample_questions, score_answers

from fakes import as_questions, make_bank


def answers_for(bank, correct: int):
    """First `correct` answers right, the rest wrong."""
    out = []
    for i, q in enumerate(bank):
        choice = q.answer if i < correct else (q.answer + 1) % len(q.options)
        out.append(SubmittedAnswer(id=q.id, choice=choice))
    return out


class SampleQuestionsTest(unittest.TestCase):
    def test_returns_n_distinct_questions_without_answers(self):
        bank = as_questions(make_bank(25))
        picked = sample_questions(bank, 10, random.Random(1))
        ids = [q.id for q in picked]
        self.assertEqual(len(ids), 10)
        self.assertEqual(len(set(ids)), 10)
        self.assertTrue(set(ids) <= {q.id for q in bank})
        for q in picked:
            self.assertNotIn("answer", q.model_dump())

    def test_small_bank_returned_whole(self):
        for size in (0, 1, 4, 9):
            with self.subTest(size=size):
                bank = as_questions(make_bank(size))
                picked = sample_questions(bank, 10, random.Random(size))
                self.assertEqual(len(picked), size)
                self.assertEqual({q.id for q in picked}, {q.id for q in bank})

    def test_bank_not_mutated(self):
        bank = as_questions(make_bank(10))
        before = [q.id for q in bank]
        sample_questions(bank, 5, random.Random(3))
        self.assertEqual([q.id for q in bank], before)

    def test_same_seed_same_sample(self):
        bank = as_questions(make_bank(30))
        a = sample_questions(bank, 10, random.Random(42))
        b = sample_questions(bank, 10, random.Random(42))
        self.assertEqual([q.id for q in a], [q.id for q in b])

    def test_orderings_are_uniform(self):
        bank = as_questions(make_bank(3))
        rng = random.Random(2024)
        trials = 6000
        counts = Counter(tuple(q.id for q in sample_questions(bank, 3, rng)) for _ in range(trials))
        self.assertEqual(len(counts), 6)
        for ordering, n in counts.items():
            self.assertAlmostEqual(n / trials, 1 / 6, delta=0.025, msg=str(ordering))

    def test_every_question_can_lead(self):
        bank = as_questions(make_bank(10))
        rng = random.Random(99)
        trials = 10000
        first = Counter(sample_questions(bank, 1, rng)[0].id for _ in range(trials))
        self.assertEqual(set(first), {q.id for q in bank})
        for qid, n in first.items():
            self.assertAlmostEqual(n / trials, 0.1, delta=0.02, msg=f"id={qid}")


class ScoreAnswersTest(unittest.TestCase):
    def setUp(self):
        self.bank = as_questions(make_bank(10))

    def test_counts_correct_answers(self):
        for correct in range(0, 11):
            with self.subTest(correct=correct):
                result = score_answers(self.bank, answers_for(self.bank, correct), threshold=7)
                self.assertEqual(result.score, correct)
                self.assertEqual(result.passed, correct >= 7)
                self.assertIsNone(result.token)

    def test_empty_answers_fail(self):
        result = score_answers(self.bank, [], threshold=7)
        self.assertEqual(result.score, 0)
        self.assertFalse(result.passed)

    def test_unknown_ids_ignored(self):
        answers = answers_for(self.bank, 3) + [SubmittedAnswer(id=999, choice=0), SubmittedAnswer(id="1", choice=0)]
        result = score_answers(self.bank, answers, threshold=7)
        self.assertEqual(result.score, 3)

    def test_duplicates_scored_independently(self):
        q = self.bank[0]
        answers = [SubmittedAnswer(id=q.id, choice=q.answer)] * 7
        result = score_answers(self.bank, answers, threshold=7)
        self.assertEqual(result.score, 7)
        self.assertTrue(result.passed)

    def test_order_does_not_matter(self):
        answers = answers_for(self.bank, 6)
        shuffled = list(answers)
        random.Random(5).shuffle(shuffled)
        self.assertEqual(
            score_answers(self.bank, answers, threshold=7).score,
            score_answers(self.bank, shuffled, threshold=7).score,
        )

    def test_threshold_is_configurable(self):
        answers = answers_for(self.bank, 5)
        self.assertFalse(score_answers(self.bank, answers, threshold=7).passed)
        self.assertTrue(score_answers(self.bank, answers, threshold=5).passed)


class StrictChoiceTest(unittest.TestCase):
    def test_choice_must_be_an_integer(self):
        for choice in ("0", True, False, 1.0):
            with self.subTest(choice=choice):
                with self.assertRaises(ValidationError):
                    SubmittedAnswer.model_validate({"id": 1, "choice": choice})

    def test_answer_key_must_be_an_integer(self):
        with self.assertRaises(ValidationError):
            Question.model_validate({"id": 1, "question": "Q?", "options": ["A", "B"], "answer": "1"})


if __name__ == "__main__":
    unittest.main()
