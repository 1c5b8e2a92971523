# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Team Composition: Unit Tests
=============================
Pure functions only, no database or HTTP.
Run:  pytest test_team_composition.py -v --cov=reliefconnect.services.team_composition
"""
import pytest

from reliefconnect.models.domain import SkillCoverage
from reliefconnect.services.team_composition import (
    TeamComposition,
    TeamValidationError,
    evaluate_coverage,
    ordered_coverage,
    validate_team,
)

MEMBER_SETS = [
    [],
    [{"skills": []}],
    [{"skills": ["First Aid"]}],
    [{"skills": ["First Aid"]}, {"skills": ["Driving", "CPR"]}],
    [{"skills": ["Translation", "Driving"]}, {}],
]
REQUIRED_SETS = [
    [],
    ["First Aid"],
    ["First Aid", "Driving"],
    ["Translation", "CPR", "Search and Rescue"],
]


# ═══════════════════════════════════════════════════════════════════════════
# evaluate_coverage
# ═══════════════════════════════════════════════════════════════════════════
class TestEvaluateCoverage:
    @pytest.mark.parametrize("required", REQUIRED_SETS)
    @pytest.mark.parametrize("members", MEMBER_SETS)
    def test_partition_is_exhaustive_and_disjoint(self, required, members):
        result = evaluate_coverage(required, members)
        assert result.covered | result.missing == set(required)
        assert result.covered & result.missing == set()

    @pytest.mark.parametrize("members", MEMBER_SETS)
    def test_empty_required_gives_empty_sets(self, members):
        result = evaluate_coverage([], members)
        assert result.covered == frozenset()
        assert result.missing == frozenset()
        assert result.complete is True

    @pytest.mark.parametrize("required", REQUIRED_SETS)
    def test_no_members_misses_everything(self, required):
        result = evaluate_coverage(required, [])
        assert result.covered == frozenset()
        assert result.missing == frozenset(required)

    def test_identical_inputs_give_identical_results(self):
        required = ["First Aid", "Translation"]
        members = [{"skills": ["First Aid"]}, {"skills": ["CPR"]}]
        assert evaluate_coverage(required, members) == evaluate_coverage(required, members)

    def test_two_members_cover_both_skills(self):
        result = evaluate_coverage(
            {"First Aid", "Driving"},
            [{"skills": ["First Aid"]}, {"skills": ["Driving", "CPR"]}],
        )
        assert result.covered == {"First Aid", "Driving"}
        assert result.missing == set()
        assert result.complete

    def test_uncovered_skill_is_missing(self):
        result = evaluate_coverage({"Translation"}, [{"skills": ["First Aid"]}])
        assert result.covered == set()
        assert result.missing == {"Translation"}
        assert not result.complete

    def test_member_without_skills_key_holds_nothing(self):
        result = evaluate_coverage(["CPR"], [{"name": "No skills"}, {"skills": None}])
        assert result.missing == {"CPR"}

    def test_skills_outside_required_are_ignored(self):
        result = evaluate_coverage(["CPR"], [{"skills": ["CPR", "Driving", "Cooking"]}])
        assert result.covered == {"CPR"}
        assert "Driving" not in result.covered | result.missing

    def test_does_not_mutate_inputs(self):
        required = ["CPR", "Driving"]
        members = [{"skills": ["CPR"]}]
        evaluate_coverage(required, members)
        assert required == ["CPR", "Driving"]
        assert members == [{"skills": ["CPR"]}]

    def test_result_is_frozen(self):
        result = evaluate_coverage(["CPR"], [])
        with pytest.raises(Exception):
            result.covered = frozenset({"CPR"})


class TestOrderedCoverage:
    def test_preserves_required_order(self):
        required = ["c", "a", "b"]
        coverage = SkillCoverage(covered=frozenset({"a", "c"}), missing=frozenset({"b"}))
        assert ordered_coverage(required, coverage) == (["c", "a"], ["b"])

    def test_drops_duplicates(self):
        required = ["a", "b", "a"]
        coverage = evaluate_coverage(required, [{"skills": ["a"]}])
        assert ordered_coverage(required, coverage) == (["a"], ["b"])


# ═══════════════════════════════════════════════════════════════════════════
# validate_team
# ═══════════════════════════════════════════════════════════════════════════
class TestValidateTeam:
    def test_valid_team_passes(self):
        validate_team("Alpha", ["v1", "v2"], "v1")

    def test_empty_name_rejected(self):
        with pytest.raises(TeamValidationError, match="Team name is required"):
            validate_team("", ["v1"], "v1")

    def test_whitespace_name_rejected(self):
        with pytest.raises(TeamValidationError, match="Team name is required"):
            validate_team("   ", ["v1"], "v1")

    def test_no_members_rejected(self):
        with pytest.raises(TeamValidationError, match="at least one volunteer"):
            validate_team("Alpha", [], None)

    def test_leader_unset_rejected(self):
        with pytest.raises(TeamValidationError, match="designate a team leader"):
            validate_team("Alpha", ["v1", "v2"], None)

    def test_leader_outside_members_rejected(self):
        with pytest.raises(TeamValidationError, match="must be one of the team members"):
            validate_team("Alpha", ["v1", "v2"], "v3")

    def test_name_checked_before_members(self):
        with pytest.raises(TeamValidationError, match="Team name is required"):
            validate_team("", [], None)

    def test_is_a_value_error(self):
        assert issubclass(TeamValidationError, ValueError)


# ═══════════════════════════════════════════════════════════════════════════
# TeamComposition
# ═══════════════════════════════════════════════════════════════════════════
class TestTeamComposition:
    def test_add_member_twice_is_noop(self):
        team = TeamComposition()
        assert team.add_member("v1") is True
        assert team.add_member("v1") is False
        assert team.member_ids == ["v1"]

    def test_constructor_dedupes_members_and_skills(self):
        team = TeamComposition(member_ids=["v1", "v1", "v2"], required_skills=["s", "s"])
        assert team.member_ids == ["v1", "v2"]
        assert team.required_skills == ["s"]

    def test_removing_leader_clears_designation(self):
        team = TeamComposition(member_ids=["v1", "v2"], leader_id="v1")
        assert team.remove_member("v1") is True
        assert team.leader_id is None
        assert team.member_ids == ["v2"]

    def test_removing_other_member_keeps_leader(self):
        team = TeamComposition(member_ids=["v1", "v2"], leader_id="v1")
        team.remove_member("v2")
        assert team.leader_id == "v1"

    def test_remove_absent_member_returns_false(self):
        team = TeamComposition(member_ids=["v1"])
        assert team.remove_member("v9") is False

    def test_new_leader_silently_replaces_previous(self):
        team = TeamComposition(member_ids=["v1", "v2"], leader_id="v1")
        assert team.set_leader("v2") == "v1"
        assert team.leader_id == "v2"

    def test_leader_must_be_member(self):
        team = TeamComposition(member_ids=["v1"])
        with pytest.raises(TeamValidationError):
            team.set_leader("v2")
        assert team.leader_id is None

    def test_toggle_skill(self):
        team = TeamComposition()
        assert team.toggle_skill("cpr") is True
        assert team.required_skills == ["cpr"]
        assert team.toggle_skill("cpr") is False
        assert team.required_skills == []

    def test_coverage_uses_directory(self):
        team = TeamComposition(member_ids=["v1", "v2"], required_skills=["a", "b", "c"])
        directory = {"v1": {"skills": ["a"]}, "v2": {"skills": ["b"]}}
        result = team.coverage(directory)
        assert result.covered == {"a", "b"}
        assert result.missing == {"c"}

    def test_coverage_skips_members_missing_from_directory(self):
        team = TeamComposition(member_ids=["v1", "gone"], required_skills=["a"])
        assert team.coverage({"v1": {"skills": ["a"]}}).complete

    def test_from_record(self):
        team = TeamComposition.from_record(
            {"members": ["v1"], "leader_id": "v1", "skills_required": ["a"]}
        )
        assert team.member_ids == ["v1"]
        assert team.leader_id == "v1"
        assert team.required_skills == ["a"]

    def test_validate_delegates_to_rules(self):
        team = TeamComposition(member_ids=["v1", "v2"])
        with pytest.raises(TeamValidationError, match="designate a team leader"):
            team.validate("Alpha")
        team.set_leader("v2")
        team.validate("Alpha")
