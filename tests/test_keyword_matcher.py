import json
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["ATS_LLM_ENABLED"] = "0"

from app.features.resume_sections import parse_resume_into_sections  # noqa: E402
from app.schemas.ats import (  # noqa: E402
    EnhancedKeywordMatch,
    ExtractedKeywords,
    KeywordContext,
    KeywordData,
    SectionLocation,
)
from app.semantic.keyword_matcher import (  # noqa: E402
    AdvancedKeywordMatcher,
    contextual_score,
    match_rank,
    proximity,
    select_best_match,
)


class FakeAIClient:
    def __init__(self, payload):
        self.payload = payload
        self.requests = []

    async def complete(self, request):
        self.requests.append(request)
        return json.dumps(self.payload)


def _keywords(*specs):
    items = []
    for spec in specs:
        keyword = spec[0]
        importance = spec[1] if len(spec) > 1 else "required"
        context_type = spec[2] if len(spec) > 2 else "skill"
        items.append(KeywordData(keyword=keyword, context=KeywordContext(type=context_type), importance=importance))
    return ExtractedKeywords.from_keywords(items)


def _match(keyword, section="skills", confidence=1.0, contextual=1.0, frequency=1, match_type="exact"):
    return EnhancedKeywordMatch(
        original_keyword=keyword,
        matched_variation=keyword,
        match_type=match_type,
        confidence=confidence,
        context=KeywordContext(type="skill"),
        location=SectionLocation(section=section, proximity=100),
        frequency=frequency,
        contextual_score=contextual,
    )


class KeywordMatcherTests(unittest.IsolatedAsyncioTestCase):
    async def _run(self, resume, keywords, **kwargs):
        kwargs.setdefault("semantic_enabled", False)
        matcher = AdvancedKeywordMatcher(**kwargs)
        return await matcher.match_keywords(resume, keywords, parse_resume_into_sections(resume))

    async def test_synonym_match(self):
        resume = "Skills\nJS, React\n\nExperience\nBuilt web apps"
        result = await self._run(resume, _keywords(("javascript",)))

        self.assertEqual(result.unmatched_keywords, [])
        match = result.matches[0]
        self.assertEqual(match.match_type, "synonym")
        self.assertEqual(match.matched_variation, "js")
        self.assertEqual(match.confidence, 0.9)
        self.assertEqual(match.location.section, "skills")
        self.assertEqual(match.contextual_score, 1.0)

    async def test_exact_match_prefers_best_section(self):
        resume = "Summary\nPython engineer\n\nSkills\nPython, SQL"
        result = await self._run(resume, _keywords(("python",)))

        match = result.matches[0]
        self.assertEqual(match.match_type, "exact")
        self.assertEqual(match.confidence, 1.0)
        self.assertEqual(match.location.section, "skills")
        self.assertEqual(match.location.proximity, 100)

    async def test_compound_match(self):
        resume = "Experience\nBuilt machine learning pipelines for fraud scoring"
        result = await self._run(resume, _keywords(("machine learning",)))

        match = result.matches[0]
        self.assertEqual(match.match_type, "compound")
        self.assertEqual(match.matched_variation, "machine learning")
        self.assertEqual(match.confidence, 0.95)
        self.assertEqual(match.location.section, "experience")
        self.assertEqual(match.location.proximity, 80)

    async def test_compound_requires_every_part(self):
        resume = "Experience\nOperated a vending machine"
        result = await self._run(resume, _keywords(("machine learning",)))
        self.assertEqual(result.matches, [])
        self.assertEqual(result.unmatched_keywords, ["machine learning"])

    async def test_misspelling_is_partial_match(self):
        resume = "Skills\nJavscript, HTML"
        result = await self._run(resume, _keywords(("javascript",)))

        match = result.matches[0]
        self.assertEqual(match.match_type, "partial")
        self.assertEqual(match.matched_variation, "javscript")
        self.assertEqual(match.confidence, 0.6)
        self.assertEqual(match.location.proximity, 40)
        self.assertAlmostEqual(match.contextual_score, 0.7)

    async def test_matches_and_unmatched_partition_keywords(self):
        resume = "Skills\nPython, Docker"
        keywords = _keywords(("python",), ("rust",), ("docker", "preferred"))
        result = await self._run(resume, keywords)

        matched = [match.original_keyword for match in result.matches]
        self.assertEqual(matched, ["python", "docker"])
        self.assertEqual(result.unmatched_keywords, ["rust"])
        self.assertEqual(set(matched) | set(result.unmatched_keywords), {item.keyword for item in keywords.all})
        self.assertEqual(set(matched) & set(result.unmatched_keywords), set())

    async def test_whole_word_matching(self):
        resume = "Skills\nJavaScript, Gopher"
        result = await self._run(resume, _keywords(("java",), ("go",)))
        self.assertEqual(result.unmatched_keywords, ["java", "go"])

    async def test_industry_variation_match(self):
        resume = (
            "Experience\nRegistered nurse documenting patient care in electronic health records at a hospital."
        )
        result = await self._run(resume, _keywords(("ehr", "required", "tool")))

        self.assertIn("healthcare", result.detected_industries)
        match = result.matches[0]
        self.assertEqual(match.match_type, "synonym")
        self.assertEqual(match.matched_variation, "electronic health records")
        self.assertEqual(match.confidence, 0.85)
        self.assertEqual(match.context.industry, "healthcare")

    async def test_fuzzy_match_for_long_keywords(self):
        resume = "Skills\nTerrafrom, Ansible"
        result = await self._run(resume, _keywords(("terraform",)))

        match = result.matches[0]
        self.assertEqual(match.match_type, "partial")
        self.assertEqual(match.matched_variation, "terrafrom")
        self.assertEqual(match.confidence, 0.6)

    async def test_no_fuzzy_match_for_short_keywords(self):
        result = await self._run("Skills\nReakt", _keywords(("react",)))
        self.assertEqual(result.unmatched_keywords, ["react"])

    async def test_semantic_match_for_required_keyword(self):
        client = FakeAIClient({"found": True, "matchedPhrase": "container workloads", "confidence": 0.8})
        resume = "Experience\nOrchestrated container workloads on EKS"
        result = await self._run(resume, _keywords(("kubernetes",)), ai_client=client, semantic_enabled=True)

        match = result.matches[0]
        self.assertEqual(match.match_type, "semantic")
        self.assertEqual(match.matched_variation, "container workloads")
        self.assertEqual(match.confidence, 0.8)
        self.assertEqual(match.location.section, "experience")
        self.assertEqual(match.location.proximity, 50)
        self.assertEqual(len(client.requests), 1)

    async def test_semantic_accepts_truthy_found_flag(self):
        client = FakeAIClient({"found": "true", "matchedPhrase": "container workloads", "confidence": 0.8})
        resume = "Experience\nOrchestrated container workloads on EKS"
        result = await self._run(resume, _keywords(("kubernetes",)), ai_client=client, semantic_enabled=True)

        self.assertEqual(result.unmatched_keywords, [])
        self.assertEqual(result.matches[0].match_type, "semantic")

    async def test_semantic_phrase_must_exist_in_resume(self):
        client = FakeAIClient({"found": True, "matchedPhrase": "cluster orchestration", "confidence": 0.9})
        resume = "Experience\nOrchestrated container workloads on EKS"
        result = await self._run(resume, _keywords(("kubernetes",)), ai_client=client, semantic_enabled=True)
        self.assertEqual(result.unmatched_keywords, ["kubernetes"])

    async def test_semantic_skipped_for_preferred_keywords(self):
        client = FakeAIClient({"found": True, "matchedPhrase": "container workloads"})
        resume = "Experience\nOrchestrated container workloads on EKS"
        result = await self._run(
            resume, _keywords(("kubernetes", "preferred")), ai_client=client, semantic_enabled=True
        )
        self.assertEqual(result.unmatched_keywords, ["kubernetes"])
        self.assertEqual(client.requests, [])

    async def test_semantic_disabled(self):
        client = FakeAIClient({"found": True, "matchedPhrase": "container workloads"})
        resume = "Experience\nOrchestrated container workloads on EKS"
        result = await self._run(resume, _keywords(("kubernetes",)), ai_client=client, semantic_enabled=False)
        self.assertEqual(result.unmatched_keywords, ["kubernetes"])
        self.assertEqual(client.requests, [])

    async def test_fuzzy_runs_only_without_earlier_candidates(self):
        resume = "Skills\nJS\n\nExperience\nKubernets clusters, Terrafrom"
        keywords = _keywords(("javascript",), ("kubernetes",), ("terraform",))
        with patch.object(AdvancedKeywordMatcher, "_fuzzy_matches", return_value=[]) as fuzzy:
            result = await self._run(resume, keywords)

        by_keyword = {match.original_keyword: match for match in result.matches}
        self.assertEqual(by_keyword["javascript"].match_type, "synonym")
        self.assertEqual(by_keyword["javascript"].matched_variation, "js")
        self.assertEqual(by_keyword["kubernetes"].match_type, "partial")
        self.assertEqual(by_keyword["kubernetes"].matched_variation, "kubernets")
        self.assertEqual(result.unmatched_keywords, ["terraform"])
        self.assertEqual(fuzzy.call_count, 1)
        self.assertEqual(fuzzy.call_args[0][0].keyword, "terraform")

    async def test_preamble_is_not_matched(self):
        resume = "Jane Doe\nPython developer\n\nSkills\nSQL"
        result = await self._run(resume, _keywords(("python",), ("sql",)))

        self.assertEqual([match.original_keyword for match in result.matches], ["sql"])
        self.assertEqual(result.unmatched_keywords, ["python"])

    async def test_headerless_resume_is_not_matched(self):
        result = await self._run("Jane Doe\nPython developer building APIs", _keywords(("python",)))
        self.assertEqual(result.matches, [])
        self.assertEqual(result.unmatched_keywords, ["python"])

    async def test_proximity_uses_whole_word_position(self):
        result = await self._run("Skills\nGoogle Cloud, Kubernetes, Terraform, Go", _keywords(("go",)))

        match = result.matches[0]
        self.assertEqual(match.match_type, "exact")
        self.assertEqual(match.location.proximity, 5)

    async def test_missing_required_keywords_produce_critical_recommendation(self):
        result = await self._run("Skills\nPython", _keywords(("python",), ("rust",)))
        critical = [item for item in result.recommendations if item.priority == "CRITICAL"]
        self.assertEqual(len(critical), 1)
        self.assertIn("rust", critical[0].issue)

    async def test_empty_keywords(self):
        result = await self._run("Skills\nPython", ExtractedKeywords())
        self.assertEqual(result.matches, [])
        self.assertEqual(result.unmatched_keywords, [])


class MatchSelectionTests(unittest.TestCase):
    def test_contextual_score_lookup(self):
        self.assertEqual(contextual_score("skill", "skills"), 1.0)
        self.assertEqual(contextual_score("degree", "education"), 0.5)
        self.assertEqual(contextual_score("industry_term", "experience"), 0.5)
        self.assertEqual(contextual_score("skill", "nowhere"), 0.5)
        self.assertEqual(contextual_score("unknown", "skills"), 0.5)

    def test_proximity_skips_embedded_occurrences(self):
        self.assertEqual(proximity("go", "Google Cloud, Kubernetes, Terraform, Go"), 5)
        self.assertEqual(proximity("go", "Go, Rust"), 100)
        self.assertEqual(proximity("go", "Gopher"), 0)
        self.assertEqual(proximity("go", ""), 0)

    def test_rank_rewards_frequency(self):
        self.assertGreater(match_rank(_match("python", frequency=3)), match_rank(_match("python")))

    def test_best_match_by_rank(self):
        weak = _match("python", section="other", contextual=0.2)
        strong = _match("python", section="skills", contextual=1.0)
        self.assertIs(select_best_match([weak, strong]), strong)

    def test_ties_keep_first_candidate(self):
        first = _match("python", section="skills")
        second = _match("python", section="summary")
        self.assertIs(select_best_match([first, second]), first)

    def test_no_candidates(self):
        self.assertIsNone(select_best_match([]))


if __name__ == "__main__":
    unittest.main()
