from __future__ import annotations

import pytest

from src.academy_attendance.academy_attendance.core.enums import MembershipStatus
from src.academy_attendance.academy_attendance.core.exceptions import NotFoundError, ValidationError
from src.academy_attendance.academy_attendance.students.service import StudentService
from tests.fakes import InMemoryStudents, student


def _repo() -> InMemoryStudents:
    return InMemoryStudents(
        [
            student(1, "Alex", "Chen"),
            student(2, "Sarah", "Kim"),
            student(3, "Old", "Member", membership_status=MembershipStatus.CANCELLED),
        ],
        pins={1: "1234", 3: "7777"},
    )


def test_assign_pin():
    repo = _repo()
    StudentService(repo).assign_pin(2, "4321")
    assert repo.pins[2] == "4321"


def test_pin_taken_by_another_active_student_is_rejected():
    repo = _repo()
    with pytest.raises(ValidationError):
        StudentService(repo).assign_pin(2, "1234")
    assert 2 not in repo.pins


def test_pin_of_inactive_student_can_be_reused():
    repo = _repo()
    StudentService(repo).assign_pin(2, "7777")
    assert repo.pins[2] == "7777"


def test_reassigning_own_pin_is_allowed():
    repo = _repo()
    StudentService(repo).assign_pin(1, "1234")
    assert repo.pins[1] == "1234"


@pytest.mark.parametrize("pin", ["123", "abcd", "12 34", ""])
def test_pin_format(pin):
    with pytest.raises(ValidationError):
        StudentService(_repo()).assign_pin(2, pin)


def test_unknown_student():
    with pytest.raises(NotFoundError):
        StudentService(_repo()).assign_pin(9, "5555")


def test_generate_pin_is_unused_and_assigned():
    repo = _repo()
    pin = StudentService(repo).generate_pin(2)

    assert len(pin) == 4 and pin.isdigit()
    assert pin != "1234"
    assert repo.pins[2] == pin


@pytest.mark.parametrize("pin", ["١٢٣٥", "１２３５", "12 5", "12345"])
def test_pin_must_be_four_ascii_digits(pin):
    repo = _repo()
    with pytest.raises(ValidationError):
        StudentService(repo).assign_pin(2, pin)
    assert 2 not in repo.pins
