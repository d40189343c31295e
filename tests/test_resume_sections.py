import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.features.resume_sections import detect_section_header, parse_resume_into_sections  # noqa: E402

RESUME = (
    "Jane Doe\n"
    "jane@example.com\n"
    "\n"
    "Summary\n"
    "Backend engineer.\n"
    "\n"
    "Experience:\n"
    "Built APIs with Python.\n"
    "\n"
    "Education\n"
    "BSc Computer Science\n"
    "\n"
    "Skills\n"
    "Python, Docker"
)


class SectionHeaderTests(unittest.TestCase):
    def test_recognizes_headers(self):
        self.assertEqual(detect_section_header("  Work   Experience "), "experience")
        self.assertEqual(detect_section_header("Technical Skills:"), "skills")
        self.assertEqual(detect_section_header("PROFESSIONAL SUMMARY"), "summary")
        self.assertEqual(detect_section_header("Certifications"), "certifications")
        self.assertEqual(detect_section_header("Contact"), "contact")

    def test_rejects_content_lines(self):
        self.assertIsNone(detect_section_header("Python developer"))
        self.assertIsNone(detect_section_header(""))
        self.assertIsNone(detect_section_header("   "))
        self.assertIsNone(detect_section_header("Skills and tools I use"))


class ResumeSectionParserTests(unittest.TestCase):
    def test_splits_sections_with_line_numbers(self):
        sections = parse_resume_into_sections(RESUME)

        self.assertEqual(sections.summary.content, "Backend engineer.")
        self.assertEqual(sections.summary.header_line, 3)
        self.assertEqual(sections.summary.start_line, 4)
        self.assertEqual(sections.summary.end_line, 5)
        self.assertEqual(sections.experience.content, "Built APIs with Python.")
        self.assertEqual(sections.experience.header_line, 6)
        self.assertEqual(sections.education.content, "BSc Computer Science")
        self.assertEqual(sections.skills.content, "Python, Docker")
        self.assertIsNone(sections.contact)
        self.assertIsNone(sections.certifications)

    def test_preamble_goes_to_other(self):
        sections = parse_resume_into_sections(RESUME)
        self.assertEqual(len(sections.other), 1)
        self.assertEqual(sections.other[0].content, "Jane Doe\njane@example.com")
        self.assertEqual(sections.other[0].start_line, 0)

    def test_detected_sections_in_canonical_order(self):
        sections = parse_resume_into_sections(RESUME)
        self.assertEqual(sections.detected_sections(), ["summary", "experience", "education", "skills"])
        names = [name for name, _ in sections.iter_sections()]
        self.assertEqual(names, ["summary", "experience", "education", "skills"])

    def test_repeated_header_is_kept_as_other(self):
        sections = parse_resume_into_sections("Skills\nPython\nExperience\nBuilt things\nSkills\nDocker")
        self.assertEqual(sections.skills.content, "Python")
        self.assertEqual([section.content for section in sections.other], ["Docker"])

    def test_text_without_headers_is_one_other_section(self):
        sections = parse_resume_into_sections("  just some text\nmore text  ")
        self.assertEqual(sections.detected_sections(), [])
        self.assertEqual(len(sections.other), 1)
        self.assertEqual(sections.other[0].content, "just some text\nmore text")

    def test_empty_sections_are_skipped(self):
        sections = parse_resume_into_sections("Summary\n\n\nSkills\nPython")
        self.assertIsNone(sections.summary)
        self.assertEqual(sections.skills.content, "Python")

    def test_blank_text(self):
        sections = parse_resume_into_sections("   \n  ")
        self.assertEqual(sections.other, [])
        self.assertEqual(sections.detected_sections(), [])


if __name__ == "__main__":
    unittest.main()
