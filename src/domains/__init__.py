# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the campus records backend.

Each domain module provides a service whose operations validate input, then
run their reads and writes as one unit of work through the
TransactionCoordinator.

Domains:
    identity: Paired account and profile lifecycle, authentication.
    library: Lending ledger and catalog.
    enrollment: Student course enrollments.
    attendance: Attendance marks.
    results: Course results.
    assignment: Coursework assignments and submissions.
    fees: Student fees.
    curriculum: Programs, courses and routines.
"""
