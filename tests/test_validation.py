"""
Tests for payload validation.

Run with: pytest tests/test_validation.py -v
"""

import pytest

from services.errors import ValidationError
from services.validation import (
    NOT_AN_OBJECT,
    Invalid,
    Valid,
    require_valid,
    validate_full_profile,
    validate_profile_create,
    validate_profile_update,
    validate_project,
    validate_work_experience,
)


class TestProfileCreate:
    def test_minimal_payload_gets_empty_collections(self):
        result = validate_profile_create({"name": "Ada", "email": "ada@example.com"})

        assert isinstance(result, Valid)
        assert result.ok is True
        profile = result.value
        assert profile.summary is None
        assert profile.education == []
        assert profile.skills == []
        assert profile.links.github is None
        assert profile.links.other == []

    def test_missing_name(self):
        result = validate_profile_create({"email": "ada@example.com"})

        assert isinstance(result, Invalid)
        assert result.ok is False
        assert result.first_error == "Name is required"

    def test_empty_name(self):
        result = validate_profile_create({"name": "", "email": "ada@example.com"})
        assert result.errors == ["Name is required"]

    def test_invalid_email(self):
        result = validate_profile_create({"name": "Ada", "email": "not-an-email"})
        assert result.errors == ["Invalid email"]

    @pytest.mark.parametrize("email", ["x@y..z", "a@b.c", "a@-.-", '"@x.y', "ada@", "@example.com"])
    def test_malformed_emails_are_rejected(self, email):
        result = validate_profile_create({"name": "Ada", "email": email})
        assert result.errors == ["Invalid email"]

    def test_email_spelling_is_preserved(self):
        result = validate_profile_create({"name": "Ada", "email": "Ada.Lovelace@Example.COM"})
        assert result.value.email == "Ada.Lovelace@Example.COM"

    def test_errors_follow_field_order(self):
        result = validate_profile_create({"email": "nope"})
        assert result.errors == ["Name is required", "Invalid email"]

    def test_education_requires_school(self):
        result = validate_profile_create(
            {"name": "Ada", "email": "ada@example.com", "education": [{"degree": "BSc"}]}
        )
        assert result.first_error == "School is required"

    def test_education_accepts_camel_case_years(self):
        result = validate_profile_create(
            {
                "name": "Ada",
                "email": "ada@example.com",
                "education": [{"school": "UCL", "startYear": "2020", "endYear": "2024"}],
            }
        )
        entry = result.value.education[0]
        assert entry.start_year == "2020"
        assert entry.end_year == "2024"

    def test_links_must_be_urls_or_null(self):
        ok = validate_profile_create(
            {"name": "Ada", "email": "ada@example.com", "links": {"github": None}}
        )
        assert ok.ok

        bad = validate_profile_create(
            {"name": "Ada", "email": "ada@example.com", "links": {"github": "not a url"}}
        )
        assert bad.errors == ["links.github: Invalid url"]

    def test_link_spelling_is_preserved(self):
        result = validate_profile_create(
            {"name": "Ada", "email": "ada@example.com", "links": {"github": "https://github.com/ada"}}
        )
        assert result.value.links.github == "https://github.com/ada"

    def test_other_links_are_validated(self):
        result = validate_profile_create(
            {"name": "Ada", "email": "ada@example.com", "links": {"other": ["https://ok.dev", "bad"]}}
        )
        assert result.errors == ["links.other[1]: Invalid url"]

    def test_wrong_type_reports_path(self):
        result = validate_profile_create({"name": "Ada", "email": "ada@example.com", "skills": "python"})
        assert result.first_error.startswith("skills: ")

    @pytest.mark.parametrize("payload", [None, [], "profile", 42])
    def test_non_object_payload(self, payload):
        result = validate_profile_create(payload)
        assert result.errors == [NOT_AN_OBJECT]

    def test_unknown_keys_are_ignored(self):
        result = validate_profile_create(
            {"name": "Ada", "email": "ada@example.com", "id": "forged", "createdAt": "yesterday"}
        )
        assert result.ok
        assert not hasattr(result.value, "id")


class TestProfileUpdate:
    def test_empty_patch_is_valid(self):
        result = validate_profile_update({})
        assert result.ok
        assert result.value.model_dump(exclude_unset=True) == {}

    def test_only_supplied_fields_are_set(self):
        result = validate_profile_update({"summary": "New summary"})
        assert result.value.model_dump(exclude_unset=True) == {"summary": "New summary"}

    def test_summary_may_be_cleared(self):
        result = validate_profile_update({"summary": None})
        assert result.ok
        assert result.value.model_dump(exclude_unset=True) == {"summary": None}

    def test_supplied_email_must_be_valid(self):
        assert validate_profile_update({"email": "bad"}).errors == ["Invalid email"]

    def test_null_name_is_rejected(self):
        assert validate_profile_update({"name": None}).errors == ["Name is required"]

    def test_null_skills_are_rejected(self):
        result = validate_profile_update({"skills": None})
        assert result.errors == ["skills: skills cannot be null"]


class TestProjectAndWork:
    def test_project_requires_title_and_description(self):
        result = validate_project({})
        assert result.errors == ["Title is required", "Description is required"]

    def test_project_defaults(self):
        project = validate_project({"title": "T", "description": "D"}).value
        assert project.skills == []
        assert project.links.repo is None

    def test_work_requires_role_and_company(self):
        assert validate_work_experience({"role": "Dev"}).errors == ["Company is required"]

    def test_work_highlight_requires_bullet(self):
        result = validate_work_experience(
            {"role": "Dev", "company": "Acme", "highlights": [{"bullet": ""}]}
        )
        assert result.errors == ["Bullet is required"]

    def test_work_optional_fields(self):
        work = validate_work_experience(
            {"role": "Dev", "company": "Acme", "startDate": "2020-01", "location": "Remote"}
        ).value
        assert work.start_date == "2020-01"
        assert work.end_date is None
        assert work.highlights == []


class TestFullProfile:
    def test_nested_collections_are_typed(self, sample_profile):
        result = validate_full_profile(sample_profile)

        assert result.ok
        assert len(result.value.projects) == 2
        assert len(result.value.work) == 1
        assert result.value.work[0].highlights[0].bullet == "Described the first computer program"

    def test_collections_default_to_empty(self):
        result = validate_full_profile({"name": "Ada", "email": "ada@example.com"})
        assert result.value.projects == []
        assert result.value.work == []

    def test_one_bad_project_rejects_everything(self, sample_profile):
        sample_profile["projects"].append({"title": "", "description": "x"})
        result = validate_full_profile(sample_profile)

        assert not result.ok
        assert result.first_error == "projects[2]: Title is required"

    def test_bad_work_item_is_positioned(self, sample_profile):
        sample_profile["work"][0]["company"] = ""
        result = validate_full_profile(sample_profile)
        assert result.first_error == "work[0]: Company is required"


def test_require_valid_unwraps_or_raises():
    value = require_valid(validate_project({"title": "T", "description": "D"}))
    assert value.title == "T"

    with pytest.raises(ValidationError) as excinfo:
        require_valid(validate_project({"title": "T"}))
    assert excinfo.value.message == "Description is required"
    assert excinfo.value.status_code == 400
