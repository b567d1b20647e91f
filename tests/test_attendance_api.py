import pytest
from datetime import date
from fastapi import status

from hr_attendance.models.attendance import Attendance

DAY = "2025-06-02"
JUNE = {"month": 6, "year": 2025}


@pytest.fixture
def mumbai(seed_employee):
    return [
        seed_employee("E001", name="Asha"),
        seed_employee("E002", name="Ravi"),
        seed_employee("E003", name="Meera", monthly_leaves=[
            {"year": 2025, "month": 6, "allocated": 2, "used": 2, "available": 0},
        ]),
    ]


def _mark(client, statuses=None, location="Mumbai", on_date=DAY):
    return client.post("/api/attendance/bulk", json={
        "location": location,
        "date": on_date,
        "statuses": {str(k): v for k, v in (statuses or {}).items()},
    })


def _leave_balances(client):
    response = client.get("/api/employees/leaves", params=JUNE)
    assert response.status_code == 200
    return {row["employee_code"]: row["paid_leaves"] for row in response.json()}


def test_bulk_marking_defaults_to_present(client, mumbai):
    response = _mark(client, {mumbai[1].id: "absent"})
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    marked = {r["employee_id"]: r["status"] for r in body["data"]}
    assert marked == {mumbai[0].id: "present", mumbai[1].id: "absent", mumbai[2].id: "present"}
    assert body["messages"] == ["Attendance marked for 3 employee(s)"]
    assert body["metadata"] == {"location": "Mumbai", "date": DAY}

    listed = client.get("/api/attendance", params={"date": DAY, "location": "Mumbai"}).json()
    assert len(listed) == 3


def test_second_submission_for_same_day_is_rejected(client, mumbai):
    assert _mark(client).status_code == 201
    response = _mark(client, {mumbai[0].id: "absent"})
    assert response.status_code == status.HTTP_409_CONFLICT
    error = response.json()["errors"][0]
    assert error["code"] == "ATTENDANCE_ALREADY_MARKED"
    assert sorted(error["details"]["employee_ids"]) == sorted(e.id for e in mumbai)

    # The first submission is left as it was
    listed = client.get("/api/attendance", params={"date": DAY}).json()
    assert {r["status"] for r in listed} == {"present"}


def test_leave_without_balance_rejects_whole_batch(client, mumbai):
    response = _mark(client, {mumbai[2].id: "leave"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    error = response.json()["errors"][0]
    assert error["code"] == "INSUFFICIENT_PAID_LEAVES"
    assert error["details"]["violations"][0]["employee_id"] == mumbai[2].id

    assert client.get("/api/attendance", params={"date": DAY}).json() == []


def test_leave_and_half_day_consume_balance(client, mumbai):
    response = _mark(client, {mumbai[0].id: "leave", mumbai[1].id: "half-day"})
    assert response.status_code == 201

    balances = _leave_balances(client)
    assert balances["E001"]["used"] == 1
    assert balances["E001"]["available"] == 1
    assert balances["E002"]["used"] == 0.5
    assert balances["E002"]["available"] == 1.5


def test_empty_roster(client, mumbai):
    response = _mark(client, location="Nowhere")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["code"] == "EMPTY_ROSTER"


def test_selection_outside_roster(client, mumbai, seed_employee):
    elsewhere = seed_employee("P001", location="Pune")
    response = _mark(client, {elsewhere.id: "absent"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["errors"][0]["code"] == "UNKNOWN_EMPLOYEE"


def test_marked_at_other_location_conflicts(client, mumbai, db_session):
    db_session.add(Attendance(employee_id=mumbai[0].id, date=date(2025, 6, 2),
                              status="present", location="Pune"))
    db_session.commit()
    response = _mark(client)
    assert response.status_code == 409
    assert response.json()["errors"][0]["details"]["employee_ids"] == [mumbai[0].id]


def test_status_edit_moves_leave_balance(client, mumbai):
    _mark(client, {mumbai[0].id: "leave"})
    record = next(r for r in client.get("/api/attendance", params={"date": DAY}).json()
                  if r["employee_id"] == mumbai[0].id)

    response = client.put(f"/api/attendance/{record['id']}", json={"status": "present"})
    assert response.status_code == 200
    assert response.json()["status"] == "present"
    assert _leave_balances(client)["E001"]["available"] == 2


def test_status_edit_to_leave_is_gated(client, mumbai):
    _mark(client)
    record = next(r for r in client.get("/api/attendance", params={"date": DAY}).json()
                  if r["employee_id"] == mumbai[2].id)
    response = client.put(f"/api/attendance/{record['id']}", json={"status": "leave"})
    assert response.status_code == 422
    assert response.json()["errors"][0]["code"] == "INSUFFICIENT_PAID_LEAVES"


def test_edit_unknown_record(client):
    response = client.put("/api/attendance/9999", json={"status": "present"})
    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "NOT_FOUND"


def test_edit_request_workflow(client, mumbai):
    _mark(client)
    record = client.get("/api/attendance", params={"date": DAY}).json()[0]

    created = client.post("/api/attendance/requests", json={
        "attendance_id": record["id"],
        "requested_status": "half-day",
        "reason": "Left early for a doctor's appointment",
    })
    assert created.status_code == 201
    request_id = created.json()["id"]
    assert created.json()["status"] == "pending"
    assert created.json()["current_status"] == "present"

    pending = client.get("/api/attendance/requests", params={"status": "pending"}).json()
    assert [r["id"] for r in pending] == [request_id]

    approved = client.put(f"/api/attendance/requests/{request_id}", json={"approve": True})
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert approved.json()["current_status"] == "half-day"
    assert approved.json()["resolved_at"] is not None

    again = client.put(f"/api/attendance/requests/{request_id}", json={"approve": False})
    assert again.status_code == 409
    assert again.json()["errors"][0]["code"] == "REQUEST_ALREADY_RESOLVED"


def test_rejected_request_leaves_record_alone(client, mumbai):
    _mark(client)
    record = client.get("/api/attendance", params={"date": DAY}).json()[0]
    request_id = client.post("/api/attendance/requests", json={
        "attendance_id": record["id"], "requested_status": "absent",
    }).json()["id"]

    rejected = client.put(f"/api/attendance/requests/{request_id}", json={"approve": False})
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["current_status"] == "present"


def test_month_listing(client, mumbai):
    _mark(client, on_date="2025-06-02")
    _mark(client, on_date="2025-06-03")
    _mark(client, on_date="2025-07-01")
    listed = client.get("/api/attendance", params=JUNE).json()
    assert len(listed) == 6


@pytest.fixture
def standalone_session():
    """Session on its own in-memory database, so a rollback inside the service is real."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from hr_attendance.database import Base

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def test_store_uniqueness_violation_becomes_conflict(standalone_session, policy):
    from hr_attendance.core.exceptions import AttendanceConflictError
    from hr_attendance.models.employee import MonthlyLeave
    from hr_attendance.schemas.attendance import AttendanceRecord, AttendanceStatus, BatchResult
    from hr_attendance.schemas.leave import MonthlyLeaveRecord
    from hr_attendance.services import attendance_service, employee_service

    db = standalone_session
    employee = employee_service.create_employee(
        db, employee_code="E001", name="Asha", location="Mumbai", salary=30000,
        monthly_leaves=[MonthlyLeaveRecord(year=2025, month=6, allocated=2, available=2)],
    )
    # Another submission got there first
    db.add(Attendance(employee_id=employee.id, date=date(2025, 6, 2), status="present", location="Mumbai"))
    db.commit()

    batch = BatchResult(
        date=date(2025, 6, 2),
        location="Mumbai",
        committed=[AttendanceRecord(
            employee_id=employee.id, date=date(2025, 6, 2), status=AttendanceStatus.LEAVE, location="Mumbai",
        )],
    )
    with pytest.raises(AttendanceConflictError) as exc_info:
        attendance_service.commit_attendance_batch(db, batch, policy)

    assert exc_info.value.employee_ids == [employee.id]
    assert db.query(Attendance).count() == 1
    stored = db.query(MonthlyLeave).filter(MonthlyLeave.employee_id == employee.id).one()
    assert stored.used == 0
    assert stored.available == 2
