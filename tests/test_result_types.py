"""Tests for optimizer assignment records."""

import pytest

from clinic_planner.result_types import AssignedPerson, Assignment
from clinic_planner.services.scoring import AssignmentStatus
from clinic_planner.timewindow import Period


def test_assignment_from_french_record():
    raw = {
        "creneau_besoin_id": "need-1-matin",
        "date": "2025-03-03",
        "periode": "matin",
        "site_id": "esp",
        "site_nom": "Centre Esplanade - Ophtalmologie",
        "site_fermeture": True,
        "nombre_requis": 2,
        "nombre_assigne": 1,
        "status": "satisfait",
        "secretaires": [{"secretaire_id": "sec-1", "nom": "Anne Roux", "is_1r": True}],
    }
    a = Assignment.from_dict(raw)
    assert a.need_slot_id == "need-1-matin"
    assert a.period is Period.MORNING
    assert a.site_closure is True
    assert a.assigned_person_ids == ["sec-1"]
    assert a.persons[0].is_1r
    assert a.assigned_count == 1
    # Status comes from the counts, the solver's value is kept aside
    assert a.status is AssignmentStatus.ROUNDED_DOWN
    assert a.solver_status is AssignmentStatus.SATISFIED


def test_assignment_counts_persons_when_no_count_reported():
    a = Assignment.from_dict(
        {
            "need_slot_id": "n-apres_midi",
            "date": "2025-03-04",
            "period": "apres_midi",
            "site_id": "s1",
            "required_count": 1,
            "persons": [{"id": "p1"}],
        }
    )
    assert a.assigned_count == 1
    assert a.status is AssignmentStatus.SATISFIED
    assert a.to_dict()["status"] == "satisfied"
    assert a.to_dict()["date"] == "2025-03-04"


def test_person_without_id_rejected():
    with pytest.raises(ValueError):
        AssignedPerson.from_dict({"name": "Nobody"})


def test_assignment_from_person_id_list():
    a = Assignment.from_dict(
        {
            "need_slot_id": "n1-matin",
            "date": "2025-03-03",
            "period": "matin",
            "site_id": "s1",
            "assigned_person_ids": ["p1", "p2"],
            "required_count": 2,
        }
    )
    assert a.assigned_person_ids == ["p1", "p2"]
    assert a.assigned_count == 2
    assert a.status is AssignmentStatus.SATISFIED


def test_plain_ids_in_persons_list():
    a = Assignment.from_dict(
        {"need_slot_id": "n1-matin", "date": "2025-03-03", "period": "matin", "site_id": "s1",
         "required_count": 1, "persons": ["p1", {"id": "p2", "is_2f": True}]}
    )
    assert a.assigned_person_ids == ["p1", "p2"]
    assert a.persons[1].is_2f


def test_to_dict_parses_back():
    original = Assignment.from_dict(
        {"need_slot_id": "n1-apres_midi", "date": "2025-03-03", "period": "apres_midi", "site_id": "s1",
         "site_closure": True, "required_count": 3, "assigned_person_ids": ["p1", "p2"]}
    )
    again = Assignment.from_dict(original.to_dict())
    assert again.assigned_person_ids == ["p1", "p2"]
    assert again.period is Period.AFTERNOON
    assert again.site_closure is True
    assert again.required_count == 3
    assert again.status is AssignmentStatus.ROUNDED_DOWN
