import copy
import unittest

from tasteexplorer.library import library_from_dict
from tasteexplorer.profile import alignment_percent, compare_profiles, derive_from_selections, style_gap, style_position

from ._fixtures import LIBRARY_DATA, make_library, pick


class CompareTests(unittest.TestCase):
    def setUp(self) -> None:
        self.library = make_library()
        self.names = {c.id: c.name for c in self.library.categories.values()}

    def _profile(self, *pairs):
        return derive_from_selections(list(pairs), self.library)

    def test_style_positions(self) -> None:
        self.assertEqual(style_position("AS1"), 1)
        self.assertEqual(style_position("AS9"), 9)
        self.assertEqual(style_position("bogus"), 5)
        self.assertEqual(style_gap("AS2", "AS8"), 6)

    def test_alignment_percent(self) -> None:
        self.assertEqual(alignment_percent([0.0, 0.0, 0.0]), 100)
        self.assertEqual(alignment_percent([5.0, 5.0, 5.0]), 0)
        self.assertEqual(alignment_percent([1.0]), 80)
        self.assertEqual(alignment_percent([]), 100)

    def test_identical_profiles_fully_aligned(self) -> None:
        p = self._profile(("living", pick("L-1", 0)), ("kitchens", pick("K-2", 0)))
        report = compare_profiles(p, p, category_names=self.names)
        self.assertEqual(report.overall_alignment, 100)
        self.assertEqual(report.divergences, [])
        self.assertEqual(report.category_alignment, {"living": 100, "kitchens": 100})

    def test_overall_alignment_from_five_point_differences(self) -> None:
        p = self._profile(("living", pick("L-1", 0)))
        s = self._profile(("living", pick("L-2", 0)))
        report = compare_profiles(p, s, category_names=self.names)
        self.assertEqual(report.axis_differences, {"ct": 3.8, "ml": 2.5, "wc": 0.6})
        self.assertEqual(report.overall_alignment, 54)

    def test_divergence_severity(self) -> None:
        p = self._profile(("living", pick("L-1", 0)), ("kitchens", pick("K-1", 0)))
        s = self._profile(("living", pick("L-2", 0)), ("kitchens", pick("K-1", 2)))
        report = compare_profiles(p, s, category_names=self.names)
        # living AS2 vs AS8 is flagged; kitchens AS3 vs AS1 is within tolerance
        self.assertEqual(len(report.divergences), 1)
        d = report.divergences[0]
        self.assertEqual((d.category_id, d.category_name, d.gap), ("living", "Living", 6))
        self.assertTrue(d.significant)
        self.assertIn("Significant divergence (6 positions apart)", d.prompt)

    def test_notable_divergence(self) -> None:
        p = self._profile(("living", pick("L-1", 0)))
        s = self._profile(("living", pick("L-3", 0)))
        d = compare_profiles(p, s).divergences[0]
        self.assertEqual(d.gap, 3)
        self.assertEqual(d.severity, "notable")
        self.assertEqual(d.to_json()["labelP"], "Architectural Modern")

    def test_four_positions_apart_is_significant(self) -> None:
        data = copy.deepcopy(LIBRARY_DATA)
        data["quads"]["L-4"] = {"category": "living", "metadata": {"ct": 6, "ml": 5, "wc": 5, "region": "tuscan", "materials": []}}
        library = library_from_dict(data)
        p = derive_from_selections([("living", pick("L-1", 0))], library)
        s = derive_from_selections([("living", pick("L-4", 0))], library)
        d = compare_profiles(p, s).divergences[0]
        self.assertEqual((d.style_p, d.style_s, d.gap), ("AS2", "AS6", 4))
        self.assertEqual(d.severity, "significant")

    def test_report_json_shape(self) -> None:
        p = self._profile(("living", pick("L-1", 0)))
        data = compare_profiles(p, p).to_json()
        self.assertEqual(set(data), {"overallAlignment", "axisDifferences", "categoryAlignment", "significantDifferences"})


if __name__ == "__main__":
    unittest.main()
