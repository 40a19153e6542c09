"""Tests for post-hoc batch validation and summaries."""

from datetime import date

from clinic_planner.result_types import AssignedPerson, Assignment
from clinic_planner.services.closure import MarkerRow, evaluate
from clinic_planner.timewindow import Period
from clinic_planner.validator import summarize_assignments, summarize_closure, validate_batch, week_dates

MON = date(2025, 3, 3)


def _a(slot, persons, period=Period.MORNING, required=1, site_id="s1", site_name="Cabinet Gare"):
    return Assignment(
        need_slot_id=slot,
        date=MON,
        period=period,
        site_id=site_id,
        site_name=site_name,
        required_count=required,
        persons=[AssignedPerson(p) for p in persons],
    )


def test_valid_batch():
    results = validate_batch([_a("n1-matin", ["p1"]), _a("n1-apres_midi", ["p1"], period=Period.AFTERNOON)])
    assert results["valid"] is True
    assert results["errors"] == []


def test_person_twice_in_same_period():
    results = validate_batch([_a("n1-matin", ["p1"]), _a("n2-matin", ["p1", "p2"], required=2)])
    assert results["valid"] is False
    assert len(results["errors"]) == 1
    assert "p1" in results["errors"][0]
    assert "n1-matin" in results["errors"][0] and "n2-matin" in results["errors"][0]


def test_role_eligibility_checked_when_given():
    roles = {"p1": {"aide_salle"}, "p2": {"accueil"}}
    results = validate_batch(
        [_a("or-matin", ["p1", "p2"], required=2)],
        role_requirements={"or-matin": "instrumentiste_aide_salle"},
        roles_of=lambda pid: roles.get(pid, set()),
    )
    assert results["valid"] is False
    assert results["errors"] == ["Person p2 is not eligible for role instrumentiste_aide_salle in slot or-matin"]


def test_warnings_for_closure_and_unfilled():
    report = evaluate("s1", [MON], [MarkerRow(date=MON, site_id="s1", person_id="p1", is_1r=True)],
                      site_name="Centre Esplanade")
    results = validate_batch([_a("n1-matin", [])], closure_reports=[report])
    assert results["valid"] is True
    assert results["warnings"] == [
        "Closure issue at Centre Esplanade on 2025-03-03: 2F",
        "1 slot(s) left without anyone assigned",
    ]


def test_summarize_assignments():
    text = summarize_assignments(
        [_a("n1-matin", ["p1"]), _a("n2-matin", [], site_name="Centre Esplanade"),
         _a("n1-apres_midi", ["p2", "p3"], period=Period.AFTERNOON, required=2)]
    )
    assert "Coverage per day per period" in text
    assert "Cabinet Gare" in text
    assert "unsatisfied" in text


def test_summarize_empty():
    assert summarize_assignments([]) == "No assignments."
    assert summarize_closure([]) == "No sites require closure."


def test_summarize_closure():
    ok = evaluate("s1", [MON], [
        MarkerRow(date=MON, site_id="s1", person_id="a", is_1r=True),
        MarkerRow(date=MON, site_id="s1", person_id="b", is_2f=True),
    ], site_name="Site A")
    bad = evaluate("s2", [MON], [
        MarkerRow(date=MON, site_id="s2", person_id="a", is_1r=True),
        MarkerRow(date=MON, site_id="s2", person_id="b", is_1r=True),
    ], site_name="Site B")
    text = summarize_closure([ok, bad])
    assert "[OK] Site A" in text
    assert "[WARN] Site B:" in text
    assert "2025-03-03: missing 2F; multiple 1R" in text


def test_week_dates():
    days = week_dates(MON)
    assert len(days) == 7
    assert days[-1] == date(2025, 3, 9)


def test_double_booking_from_person_id_records():
    batch = [
        Assignment.from_dict({"need_slot_id": "n1-matin", "date": "2025-03-03", "period": "matin",
                              "site_id": "s1", "required_count": 1, "assigned_person_ids": ["p1"]}),
        Assignment.from_dict({"need_slot_id": "n2-matin", "date": "2025-03-03", "period": "matin",
                              "site_id": "s2", "required_count": 1, "assigned_person_ids": ["p1"]}),
    ]
    results = validate_batch(batch)
    assert results["valid"] is False
    assert "p1" in results["errors"][0]
