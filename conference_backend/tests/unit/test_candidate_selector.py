"""
Unit tests for person candidate selection.
"""

import pytest

from conference_backend.src.services.candidate_selector import (
    CandidateSelector,
    is_person_candidate,
    normalize_conference_ids,
)


class TestIsPersonCandidate:
    """Tests for the candidate predicate."""

    def test_single_conference_without_account(self):
        person = {"hasAccount": False, "speaker": {"submittedConferenceIds": ["conf-1"]}}
        assert is_person_candidate(person, "conf-1") is True

    def test_missing_has_account_counts_as_false(self):
        person = {"speaker": {"submittedConferenceIds": ["conf-1"]}}
        assert is_person_candidate(person, "conf-1") is True

    def test_person_with_account_is_kept(self):
        person = {"hasAccount": True, "speaker": {"submittedConferenceIds": ["conf-1"]}}
        assert is_person_candidate(person, "conf-1") is False

    def test_person_with_two_conferences_is_kept(self):
        person = {"hasAccount": False, "speaker": {"submittedConferenceIds": ["conf-1", "conf-2"]}}
        assert is_person_candidate(person, "conf-1") is False

    def test_ids_are_trimmed_and_blank_ids_ignored(self):
        person = {"hasAccount": False, "speaker": {"submittedConferenceIds": [" conf-1 ", "", None]}}
        assert is_person_candidate(person, "conf-1") is True

    def test_same_id_twice_is_not_exactly_one_entry(self):
        person = {"hasAccount": False, "speaker": {"submittedConferenceIds": ["conf-1", "conf-1"]}}
        assert is_person_candidate(person, "conf-1") is False

    @pytest.mark.parametrize("speaker", [None, {}, {"submittedConferenceIds": "conf-1"}])
    def test_malformed_speaker_block(self, speaker):
        assert is_person_candidate({"speaker": speaker}, "conf-1") is False

    def test_normalize_conference_ids(self):
        assert normalize_conference_ids([" a", "b ", "", None, 3]) == ["a", "b", "3"]


class TestCandidateSelector:
    """Tests for CandidateSelector.find_person_candidates()."""

    def test_finds_only_exclusive_persons(self, store, sample_person):
        sample_person("p1", " Solo@Example.com", ["conf-1"])
        sample_person("p2", "shared@example.com", ["conf-1", "conf-2"])
        sample_person("p3", "account@example.com", ["conf-1"], has_account=True)
        sample_person("p4", "other@example.com", ["conf-2"])

        candidates = CandidateSelector(store).find_person_candidates("conf-1")

        assert [c.id for c in candidates] == ["p1"]
        assert candidates[0].email_index_id == "solo@example.com"
