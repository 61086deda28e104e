import unittest

from farmguard.services.detection import (
    compute_overall_health,
    compute_average_confidence,
    enrich_analysis,
    has_leaf_damage,
    nutrient_deficiencies,
    primary_detection,
)


class TestOverallHealth(unittest.TestCase):

    def test_healthy_crop_scores_full_marks(self):
        self.assertEqual(compute_overall_health({"severity": "none"}), 100)

    def test_unknown_or_missing_severity_starts_from_full_marks(self):
        self.assertEqual(compute_overall_health({}), 100)
        self.assertEqual(compute_overall_health({"severity": "weird"}), 100)
        self.assertEqual(compute_overall_health(None), 100)

    def test_penalties_per_detection(self):
        analysis = {
            "severity": "medium",
            "diseases": [{"name": "Rust"}, {"name": "Blight"}],
            "pests": [{"name": "Aphid"}],
            "animals": [{"type": "deer"}],
        }
        # 60 - 2*5 - 3 - 2
        self.assertEqual(compute_overall_health(analysis), 45)

    def test_never_below_zero(self):
        analysis = {"severity": "critical", "diseases": [{"name": str(i)} for i in range(10)]}
        self.assertEqual(compute_overall_health(analysis), 0)

    def test_malformed_lists_are_ignored(self):
        self.assertEqual(compute_overall_health({"severity": "low", "diseases": "rust", "pests": [1, None]}), 85)


class TestAverageConfidence(unittest.TestCase):

    def test_nothing_detected_means_full_confidence(self):
        self.assertEqual(compute_average_confidence({"diseases": [], "pests": []}), 100.0)

    def test_mean_across_all_detections(self):
        analysis = {
            "diseases": [{"confidence": 90}],
            "pests": [{"confidence": "70%"}],
            "animals": [{"confidence": 140}, {"confidence": None}],
        }
        self.assertAlmostEqual(compute_average_confidence(analysis), (90 + 70 + 100) / 3)


class TestDerivedFields(unittest.TestCase):

    def test_nutrient_deficiencies(self):
        analysis = {"diseases": [
            {"name": "Nitrogen deficiency", "category": "nutrient_deficiency"},
            {"name": "Leaf rust", "category": "fungal"},
        ]}
        self.assertEqual([d["name"] for d in nutrient_deficiencies(analysis)], ["Nitrogen deficiency"])

    def test_leaf_damage(self):
        self.assertFalse(has_leaf_damage({"severity": "none", "diseases": [{"symptoms": ["spots"]}]}))
        self.assertTrue(has_leaf_damage({"severity": "low", "diseases": [{"symptoms": ["spots"]}]}))
        self.assertTrue(has_leaf_damage({"severity": "high", "pests": [{"damageType": "chewing"}]}))
        self.assertFalse(has_leaf_damage({"severity": "high"}))

    def test_primary_detection_priority(self):
        analysis = {
            "pests": [{"name": "Aphid", "confidence": 60}],
            "diseases": [{"name": "Rust", "confidence": 80}],
        }
        self.assertEqual(primary_detection(analysis), ("disease", "Rust", 80.0))
        self.assertEqual(primary_detection({"animals": [{"type": "deer"}]}), ("wildlife", "deer", None))
        self.assertEqual(primary_detection({}), ("healthy", "Healthy", None))

    def test_enrich_analysis(self):
        analysis = {"severity": "low", "pests": [{"name": "Aphid", "confidence": 75}], "degraded": False}
        enriched = enrich_analysis(analysis, model="gemini-test", processing_time_ms=42, language="hi")

        self.assertEqual(enriched["overallHealth"], 82)
        self.assertEqual(enriched["avgConfidence"], 75.0)
        self.assertEqual(enriched["insects"], analysis["pests"])
        self.assertEqual(enriched["modelMetadata"]["model"], "gemini-test")
        self.assertEqual(enriched["modelMetadata"]["processingTimeMs"], 42)
        self.assertEqual(enriched["modelMetadata"]["language"], "hi")
        self.assertFalse(enriched["modelMetadata"]["degraded"])
        self.assertNotIn("overallHealth", analysis)


if __name__ == "__main__":
    unittest.main()
