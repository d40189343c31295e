import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.features.ats_checks import (  # noqa: E402
    analyze_bonus_features,
    analyze_contact_info,
    analyze_format_compatibility,
    analyze_parseability,
    analyze_structural_compliance,
    extract_certifications,
    extract_experience_years,
)
from app.features.resume_sections import parse_resume_into_sections  # noqa: E402
from app.schemas.ats import EnhancedKeywordMatch, KeywordContext, ParserMetadata, SectionLocation  # noqa: E402


class ParseabilityTests(unittest.TestCase):
    def test_missing_metadata(self):
        result = analyze_parseability(None)
        self.assertEqual(result.score, 50)
        self.assertFalse(result.critical_failures)
        self.assertEqual([item.priority for item in result.recommendations], ["MEDIUM"])

    def test_clean_metadata(self):
        result = analyze_parseability(ParserMetadata(parsing_confidence=95, word_count=400))
        self.assertEqual(result.score, 100)
        self.assertEqual(result.issues, [])
        self.assertEqual(result.recommendations, [])

    def test_formatting_penalties(self):
        result = analyze_parseability(ParserMetadata(formatting_issues=["tables", "graphics"], word_count=400))
        self.assertEqual(result.score, 50)
        self.assertEqual([item.priority for item in result.recommendations], ["HIGH", "MEDIUM"])

    def test_low_word_count(self):
        result = analyze_parseability(ParserMetadata(word_count=120))
        self.assertEqual(result.score, 50)
        self.assertFalse(result.critical_failures)
        self.assertEqual(result.recommendations[0].priority, "HIGH")

    def test_very_low_word_count_is_critical(self):
        result = analyze_parseability(ParserMetadata(word_count=80))
        self.assertTrue(result.critical_failures)
        self.assertEqual(result.score, 10)

    def test_low_confidence_is_critical(self):
        result = analyze_parseability(ParserMetadata(parsing_confidence=10, word_count=400))
        self.assertTrue(result.critical_failures)
        self.assertEqual(result.score, 10)
        self.assertIn("CRITICAL", [item.priority for item in result.recommendations])

    def test_parser_warnings(self):
        result = analyze_parseability(ParserMetadata(word_count=400, ats_warnings=["font embedded", "scanned page"]))
        self.assertEqual(result.score, 80)
        self.assertEqual(len(result.recommendations), 1)

    def test_score_never_negative(self):
        metadata = ParserMetadata(
            formatting_issues=["multi_column", "tables", "graphics", "header", "special_chars"],
            word_count=120,
        )
        self.assertEqual(analyze_parseability(metadata).score, 0)


class StructuralComplianceTests(unittest.TestCase):
    def test_complete_resume(self):
        text = (
            "Contact\njane@example.com\nSummary\nEngineer\nExperience\nBuilt APIs\n"
            "Education\nBSc\nSkills\nPython\nCertifications\nAWS Certified"
        )
        result = analyze_structural_compliance(parse_resume_into_sections(text))
        self.assertEqual(result.score, 100)
        self.assertEqual(result.missing_critical_sections, [])
        self.assertEqual(result.order_score, 100)
        self.assertEqual(
            result.section_order, ["contact", "summary", "experience", "education", "skills", "certifications"]
        )

    def test_missing_sections_and_order(self):
        result = analyze_structural_compliance(parse_resume_into_sections("Skills\nPython\nEducation\nBSc"))
        self.assertEqual(result.score, 5)
        self.assertEqual(result.missing_critical_sections, ["contact", "experience"])
        self.assertEqual(result.section_order, ["skills", "education"])
        self.assertEqual(result.order_score, 90)
        self.assertEqual(
            [item.priority for item in result.recommendations], ["CRITICAL", "CRITICAL", "HIGH"]
        )


class HeuristicCheckTests(unittest.TestCase):
    def test_format_compatibility(self):
        self.assertEqual(analyze_format_compatibility("A plain resume line with normal text.").score, 100)
        self.assertEqual(analyze_format_compatibility("Resume ★★★★★ text").score, 80)
        fragmented = analyze_format_compatibility("a\nb\nc\nThis is a proper sentence line")
        self.assertEqual(fragmented.score, 85)
        self.assertEqual(fragmented.recommendations[0].priority, "LOW")

    def test_contact_info(self):
        result = analyze_contact_info("Jane Doe\njane@example.com\n(555) 123-4567")
        self.assertEqual(result.score, 100)
        self.assertEqual(result.found, ["email", "phone", "name"])
        self.assertEqual(result.recommendations, [])

    def test_missing_contact_info(self):
        result = analyze_contact_info("x\nno contact details here")
        self.assertEqual(result.score, 0)
        self.assertEqual([item.priority for item in result.recommendations], ["HIGH", "HIGH", "MEDIUM"])

    def test_certifications_and_experience(self):
        certifications = extract_certifications("AWS Certified Solutions Architect, PMP and pmp again")
        self.assertIn("AWS Certified", certifications)
        self.assertIn("PMP", certifications)
        self.assertEqual(extract_experience_years("5+ years of experience; 3 yrs exp"), 5)
        self.assertEqual(extract_experience_years("no numbers"), 0)

    def test_bonus_features(self):
        match = EnhancedKeywordMatch(
            original_keyword="backend engineer",
            matched_variation="backend engineer",
            match_type="exact",
            confidence=1.0,
            context=KeywordContext(type="job_title"),
            location=SectionLocation(section="experience", proximity=100),
            frequency=1,
            contextual_score=1.0,
        )
        result = analyze_bonus_features("AWS Certified Developer with 6 years experience", [match])
        self.assertEqual(result.score, 100)
        self.assertIn("Job Title: backend engineer", result.found)
        self.assertIn("Experience: 6 years", result.found)
        self.assertEqual(result.recommendations, [])

    def test_no_bonus_features(self):
        result = analyze_bonus_features("Nothing special", [])
        self.assertEqual(result.score, 0)
        self.assertEqual(len(result.recommendations), 2)


if __name__ == "__main__":
    unittest.main()
