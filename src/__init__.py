"""Campus Records Backend.

Transactional domain layer for an institution's records: role-holder
identities, the library lending ledger, and academic and finance records.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
