# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Value records for curriculum, enrollment, attendance, results and coursework."""

from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict


class ProgramResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CourseCreateRequest(BaseModel):
    program_id: int
    semester_number: int
    course_code: str
    course_name: str
    credits: int
    department: str
    description: str | None = None


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    program_id: int
    semester_number: int
    course_code: str
    course_name: str
    credits: int
    department: str
    description: str | None


class RoutineCreateRequest(BaseModel):
    """Timetable slot. ``faculty_id`` is optional."""

    course_id: int
    routine_type: str
    day_of_week: str
    start_time: time
    end_time: time
    room_location: str
    academic_year: str
    semester_number: int
    faculty_id: int | None = None


class RoutineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    faculty_id: int | None
    routine_type: str
    day_of_week: str
    start_time: time
    end_time: time
    room_location: str
    academic_year: str
    semester_number: int


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    enrollment_date: date
    grade: str | None


class AttendanceCreateRequest(BaseModel):
    """Attendance mark. ``taken_by_faculty_id`` is optional."""

    student_id: int
    course_id: int
    attendance_date: date
    status: str
    taken_by_faculty_id: int | None = None


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    attendance_date: date
    status: str
    taken_by_faculty_id: int | None


class ResultCreateRequest(BaseModel):
    student_id: int
    course_id: int
    semester_number: int
    academic_year: str
    result_status: str
    marks_obtained: int | None = None
    grade: str | None = None


class ResultUpdateRequest(BaseModel):
    """Only non-key fields of a result may change."""

    marks_obtained: int | None = None
    grade: str | None = None
    result_status: str | None = None


class ResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    semester_number: int
    academic_year: str
    marks_obtained: int | None
    grade: str | None
    result_status: str


class AssignmentCreateRequest(BaseModel):
    course_id: int
    faculty_id: int
    title: str
    due_date: date
    max_marks: int
    description: str | None = None


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    faculty_id: int
    title: str
    description: str | None
    due_date: date
    max_marks: int
    created_at: datetime


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assignment_id: int
    student_id: int
    submitted_at: datetime
    file_path: str
    marks_obtained: int | None
    feedback: str | None
