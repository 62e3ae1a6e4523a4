import random
import unittest

from sightwords.errors import InsufficientWordsError
from sightwords.policy.progression import Mode
from sightwords.words import targets
from sightwords.words.bank import get_sight_words
from sightwords.words.questions import build_questions
from sightwords.words.similar import levenshtein, similar_words

TARGETS = get_sight_words(6)[:10]


class QuestionTests(unittest.TestCase):
    def test_every_question_has_four_distinct_options(self) -> None:
        qs = build_questions(Mode.LEVEL3, 6, TARGETS, rng=random.Random(1))
        self.assertEqual(len(qs), 10)
        for q in qs:
            self.assertEqual(len(q.options), 4)
            self.assertEqual(len(set(q.options)), 4)
            self.assertIn(q.word, q.options)
        self.assertEqual(sorted(q.word for q in qs), sorted(TARGETS))

    def test_baseline_asks_targets_in_order_and_avoids_them_as_distractors(self) -> None:
        qs = build_questions(Mode.BASELINE, 6, TARGETS[:5], rng=random.Random(2))
        self.assertEqual([q.word for q in qs], TARGETS[:5] * 2)
        for q in qs:
            others = [o for o in q.options if o != q.word]
            self.assertFalse(set(others) & set(TARGETS[:5]))

    def test_level_one_uses_reading_grade_words(self) -> None:
        qs = build_questions(Mode.LEVEL1, 3, TARGETS, rng=random.Random(3))
        grade3 = get_sight_words(3)
        self.assertTrue(all(q.word in grade3 for q in qs))
        self.assertEqual(len({q.word for q in qs}), 10)

    def test_target_words_session_draws_from_target_list(self) -> None:
        qs = build_questions(Mode.TARGET_WORDS, 6, TARGETS[:4], rng=random.Random(4))
        self.assertEqual(len(qs), 10)
        self.assertTrue(all(q.word in TARGETS[:4] for q in qs))

    def test_grade_one_list_is_lowercased(self) -> None:
        qs = build_questions(Mode.LEVEL1, 1, [], rng=random.Random(5))
        for q in qs:
            self.assertTrue(all(o == o.lower() for o in q.options))

    def test_same_seed_same_session(self) -> None:
        a = build_questions(Mode.LEVEL2, 5, TARGETS, rng=random.Random(9))
        b = build_questions(Mode.LEVEL2, 5, TARGETS, rng=random.Random(9))
        self.assertEqual(a, b)


class TargetListTests(unittest.TestCase):
    def test_add_normalizes_and_deduplicates(self) -> None:
        words = targets.add_word([], "  Among ")
        words = targets.add_word(words, "among")
        words = targets.add_word(words, "")
        self.assertEqual(words, ["among"])

    def test_add_stops_at_limit(self) -> None:
        self.assertEqual(targets.add_word(TARGETS, "beyond"), TARGETS)

    def test_remove(self) -> None:
        self.assertEqual(targets.remove_word(["a", "b"], "A"), ["b"])

    def test_replace_keeps_position(self) -> None:
        self.assertEqual(targets.replace_word(["a", "b"], "A", " C "), ["c", "b"])
        self.assertEqual(targets.replace_word(["a", "b"], "z", "c"), ["a", "b"])
        self.assertEqual(targets.replace_word(["a", "b"], "a", "b"), ["a", "b"])
        self.assertEqual(targets.replace_word(TARGETS, TARGETS[0], "beyond")[0], "beyond")

    def test_generate_is_unique_from_grade(self) -> None:
        words = targets.generate(6, rng=random.Random(0))
        self.assertEqual(len(words), 10)
        self.assertEqual(len(set(words)), 10)
        self.assertTrue(set(words) <= set(get_sight_words(6)))

    def test_save_requires_full_list(self) -> None:
        with self.assertRaises(InsufficientWordsError) as cm:
            targets.validate_for_save(TARGETS[:9])
        self.assertEqual((cm.exception.have, cm.exception.need), (9, 10))
        self.assertEqual(targets.validate_for_save(TARGETS), TARGETS)


class SimilarWordTests(unittest.TestCase):
    def test_levenshtein(self) -> None:
        self.assertEqual(levenshtein("kitten", "sitting"), 3)
        self.assertEqual(levenshtein("", "abc"), 3)
        self.assertEqual(levenshtein("their", "there"), 2)

    def test_close_words_first_then_alphabetical(self) -> None:
        words = ["there", "these", "three", "what", "their"]
        self.assertEqual(similar_words("their", words, 3), ["there", "these", "three"])

    def test_fills_with_next_closest(self) -> None:
        self.assertEqual(similar_words("cat", ["dog", "cot", "house"], 3), ["cot", "dog", "house"])


if __name__ == "__main__":
    unittest.main()
