import unittest

from sightwords.app.participant import ParticipantInfo, make_participant, parse_participant
from sightwords.app.survey import IncompleteSurvey, build_survey
from sightwords.errors import InvalidParticipantConfig

RATINGS = {"helpfulness": 5, "engagement": 4, "ease_of_use": 3, "would_recommend": 5}


class ParticipantTests(unittest.TestCase):
    def test_levels_map_to_word_list_grades(self) -> None:
        p = make_participant(7, 3)
        self.assertEqual(p.grade_for_level(1), 3)
        self.assertEqual(p.grade_for_level(2), 5)
        self.assertEqual(p.grade_for_level(3), 7)
        self.assertEqual(p.grade_for_level(0), 7)
        self.assertEqual(p.grade_for_level(4), 7)
        with self.assertRaises(ValueError):
            p.grade_for_level(9)

    def test_reading_level_must_be_below_grade(self) -> None:
        with self.assertRaises(InvalidParticipantConfig) as cm:
            make_participant(6, 6)
        self.assertIn("disparity", str(cm.exception))

    def test_grade_range_enforced(self) -> None:
        with self.assertRaises(InvalidParticipantConfig):
            make_participant(4, 2)
        with self.assertRaises(InvalidParticipantConfig):
            make_participant(9, 2)

    def test_profile_json_uses_camel_case(self) -> None:
        self.assertEqual(make_participant(8, 2).to_json(), {"gradeLevel": 8, "readingLevel": 2})
        self.assertEqual(parse_participant({"gradeLevel": 5, "readingLevel": 1}), ParticipantInfo(grade_level=5, reading_level=1))

    def test_unparseable_profile_is_none(self) -> None:
        self.assertIsNone(parse_participant(None))
        self.assertIsNone(parse_participant({"gradeLevel": "six"}))
        self.assertIsNone(parse_participant({"gradeLevel": 5, "readingLevel": 5}))


class SurveyTests(unittest.TestCase):
    def test_complete_survey(self) -> None:
        s = build_survey("p1", RATINGS, {"liked": "  the coins ", "difficulties": ""})
        self.assertEqual(s.participant_id, "p1")
        self.assertEqual(s.liked, "the coins")
        self.assertEqual(s.improvements, "")
        out = s.to_json()
        self.assertEqual(out["q3_easeOfUse"], 3)
        self.assertEqual(out["q6_liked"], "the coins")

    def test_missing_rating_rejected(self) -> None:
        with self.assertRaises(IncompleteSurvey):
            build_survey("p1", {**RATINGS, "engagement": None}, {})

    def test_out_of_range_rating_rejected(self) -> None:
        with self.assertRaises(IncompleteSurvey):
            build_survey("p1", {**RATINGS, "helpfulness": 6}, {})


if __name__ == "__main__":
    unittest.main()
