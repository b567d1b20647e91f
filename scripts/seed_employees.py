"""Seed a few demo employees so bulk marking and reports have a roster to work on."""
from datetime import date

from hr_attendance.database import SessionLocal, init_db
from hr_attendance.models.employee import Employee
from hr_attendance.services import employee_service

init_db()
db = SessionLocal()

def create_employee(employee_code, name, location, salary, join_date=None):
    # Check if the employee already exists to avoid unique constraint errors
    existing = db.query(Employee).filter(Employee.employee_code == employee_code).first()
    if existing:
        print(f"Employee {employee_code} already exists. Skipping.")
        return

    employee = employee_service.create_employee(
        db,
        employee_code=employee_code,
        name=name,
        location=location,
        salary=salary,
        join_date=join_date,
    )
    print(f"Created {employee.employee_code} -> {employee.name} ({employee.location})")

create_employee("MUM001", "Asha Kulkarni", "Mumbai", 30000)
create_employee("MUM002", "Ravi Shetty", "Mumbai", 26000)
create_employee("MUM003", "Meera Iyer", "Mumbai", 34000, join_date=date(2025, 4, 15))
create_employee("PUN001", "Kiran Joshi", "Pune", 28000)
create_employee("PUN002", "Sameer Patil", "Pune", 24000)

db.close()
