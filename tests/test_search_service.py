"""
Unit tests for the search and aggregation service.

Run with: pytest tests/test_search_service.py -v
"""

from unittest.mock import Mock

import pytest

from services.errors import InternalError, NotFoundError, ValidationError
from services.profile_service import ProfileService
from services.search_service import SearchService, rank_skills, skill_label
from services.validation import require_valid, validate_full_profile
from storage.errors import StorageError


@pytest.fixture
def profiles(repository):
    return ProfileService(repository)


@pytest.fixture
def search(repository):
    return SearchService(repository)


def _create(profiles, payload):
    return profiles.create_profile(require_valid(validate_full_profile(payload)))


class TestKeywordSearch:
    def test_empty_query_is_rejected(self, search):
        for query in (None, "", "   "):
            with pytest.raises(ValidationError) as excinfo:
                search.search(query)
            assert excinfo.value.message == "Query parameter 'q' is required"

    def test_empty_query_never_touches_storage(self):
        repo = Mock()
        with pytest.raises(ValidationError):
            SearchService(repo).search(" ")
        repo.search_profiles.assert_not_called()

    def test_no_matches(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        result = search.search("nonexistent-token")

        assert result.counts.total == 0
        assert result.counts.profiles == 0
        assert result.results.profiles == []
        assert result.results.projects == []
        assert result.results.work == []

    def test_skill_match_is_case_insensitive(self, profiles, search, sample_profile):
        created = _create(profiles, sample_profile)
        result = search.search("python")

        assert [hit.id for hit in result.results.profiles] == [created.id]
        assert result.results.profiles[0].skills == ["Python", "Go", "Mathematics"]

    def test_substring_match_across_entities(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        result = search.search("ENGINE")

        # profile summary, project title, work summary
        assert result.counts.profiles == 1
        assert [p.title for p in result.results.projects] == ["Notes on the Engine"]
        assert [w.company for w in result.results.work] == ["Babbage Analytical"]
        assert result.counts.total == 3

    def test_project_skill_substring(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        result = search.search("writ")
        assert [p.title for p in result.results.projects] == ["Notes on the Engine"]
        assert result.counts.profiles == 0

    def test_work_role_and_company(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        assert search.search("collab").counts.work == 1
        assert search.search("babbage").counts.work == 1

    def test_wildcard_characters_are_literal(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        assert search.search("%").counts.total == 0
        assert search.search("_").counts.total == 0

    def test_surrounding_whitespace_is_part_of_the_term(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)

        assert search.search("go").counts.profiles == 1
        padded = search.search("go ")
        assert padded.query == "go "
        assert padded.counts.total == 0

    def test_query_is_echoed_and_hits_link_back(self, profiles, search, sample_profile):
        created = _create(profiles, sample_profile)
        result = search.search("Bernoulli")

        assert result.query == "Bernoulli"
        assert result.results.projects[0].profile_id == created.id

    def test_repeated_search_is_identical(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        assert search.search("a") == search.search("a")

    def test_storage_failure_is_internal(self):
        repo = Mock()
        repo.search_profiles.side_effect = StorageError("relation does not exist")
        with pytest.raises(InternalError):
            SearchService(repo).search("go")


class TestSkillFilter:
    def test_no_skill_returns_all(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        result = search.projects_by_skill()

        assert result.count == 2
        assert result.skill is None

    def test_blank_skill_counts_as_absent(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        assert search.projects_by_skill("  ").count == 2

    def test_exact_case_insensitive_match(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        result = search.projects_by_skill("MATHEMATICS")

        assert result.count == 1
        assert result.skill == "MATHEMATICS"
        assert result.projects[0].title == "Bernoulli Numbers"

    def test_substring_does_not_match(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        assert search.projects_by_skill("math").count == 0

    def test_scoped_to_profile(self, profiles, search, sample_profile):
        ada = _create(profiles, sample_profile)
        grace = _create(
            profiles,
            {
                "name": "Grace",
                "email": "grace@example.com",
                "projects": [{"title": "Compiler", "description": "A-0", "skills": ["go"]}],
            },
        )

        assert search.projects_by_skill("go").count == 2
        assert search.projects_by_skill("go", profile_id=grace.id).count == 1
        assert search.projects_by_skill(profile_id=ada.id).count == 2

    def test_unknown_profile_scope(self, search):
        with pytest.raises(NotFoundError):
            search.projects_by_skill(profile_id="1b4e28ba-2fa1-11d2-883f-0016d3cca427")


class TestTopSkills:
    def test_profile_weight_two_project_weight_one(self, profiles, search):
        _create(
            profiles,
            {
                "name": "Gopher",
                "email": "gopher@example.com",
                "skills": ["Go"],
                "projects": [
                    {"title": "A", "description": "a", "skills": ["Go"]},
                    {"title": "B", "description": "b", "skills": ["go"]},
                ],
            },
        )

        result = search.top_skills()

        assert [(s.skill, s.count) for s in result.top_skills] == [("Go", 4)]
        assert result.total_unique_skills == 1

    def test_duplicates_within_a_project_each_count(self):
        result = rank_skills([["Go"]], [["Go", "Go"]])
        assert result.top_skills[0].count == 4

    def test_label_capitalises_first_letter_of_lowercase_key(self):
        result = rank_skills([["JavaScript"]], [["NODE.JS"]])
        assert [s.skill for s in result.top_skills] == ["Javascript", "Node.js"]
        assert skill_label("c++") == "C++"
        assert skill_label("") == ""

    def test_sorted_by_count_and_truncated(self):
        project_skills = [[f"skill{i}"] * (i + 1) for i in range(12)]
        result = rank_skills([], project_skills, limit=10)

        counts = [s.count for s in result.top_skills]
        assert len(counts) == 10
        assert counts == sorted(counts, reverse=True)
        assert counts[0] == 12
        assert result.total_unique_skills == 12

    def test_ties_keep_first_seen_order(self):
        result = rank_skills([["b", "a"]], [["c"], ["d"]])
        assert [s.skill for s in result.top_skills] == ["B", "A", "C", "D"]

    def test_repeated_calls_are_stable(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        assert search.top_skills() == search.top_skills()

    def test_sample_profile_ranking(self, profiles, search, sample_profile):
        _create(profiles, sample_profile)
        result = search.top_skills()

        ranked = {s.skill: s.count for s in result.top_skills}
        assert ranked["Mathematics"] == 3
        assert ranked["Go"] == 3
        assert ranked["Python"] == 2
        assert ranked["Writing"] == 1
        assert result.total_unique_skills == 4

    def test_scoped_to_one_profile(self, profiles, search, sample_profile):
        ada = _create(profiles, sample_profile)
        _create(profiles, {"name": "Grace", "email": "grace@example.com", "skills": ["COBOL"]})

        scoped = search.top_skills(profile_id=ada.id)
        assert "Cobol" not in [s.skill for s in scoped.top_skills]
        assert scoped.total_unique_skills == 4

    def test_unscoped_counts_only_the_primary_profile(self, profiles, search):
        _create(profiles, {"name": "First", "email": "first@example.com", "skills": ["Go"]})
        _create(profiles, {"name": "Second", "email": "second@example.com", "skills": ["Rust"]})

        result = search.top_skills()

        assert [(s.skill, s.count) for s in result.top_skills] == [("Go", 2)]
        assert result.total_unique_skills == 1

    def test_unscoped_counts_every_project(self, profiles, search):
        _create(profiles, {"name": "First", "email": "first@example.com", "skills": ["Go"]})
        _create(
            profiles,
            {
                "name": "Second",
                "email": "second@example.com",
                "skills": ["Rust"],
                "projects": [{"title": "P", "description": "d", "skills": ["go", "Zig"]}],
            },
        )

        result = search.top_skills()

        assert [(s.skill, s.count) for s in result.top_skills] == [("Go", 3), ("Zig", 1)]

    def test_empty_store(self, search):
        result = search.top_skills()
        assert result.top_skills == []
        assert result.total_unique_skills == 0

    def test_limit_must_be_positive(self, search):
        with pytest.raises(ValidationError):
            search.top_skills(limit=0)
