"""
noirkit/db/__init__.py

Database module exports.

All database operations are organized by domain:
- connection.py: Connection and schema management
- users.py: Portfolio owner accounts
- profiles.py: Personal info (one row per owner)
- owned_rows.py: Ordered collections (social links, projects, tech stack, achievements)
- contact_form.py: Contact form and its fields
- contact_submissions.py: Visitor submissions (write-once)
"""

# Connection and schema
from .connection import connect, init_schema, new_id

# User operations
from .users import (
    get_user_by_id,
    get_user_auth_by_username,
    create_user_with_password,
)

# Personal info
from .profiles import get_profile, get_first_profile_owner_id, upsert_profile

# Ordered collections
from .owned_rows import (
    TABLES,
    get_owned_row,
    list_owned_rows,
    insert_owned_row,
    update_owned_row,
    delete_owned_row,
    reorder_owned_rows,
)

# Contact form
from .contact_form import (
    get_contact_form,
    list_contact_fields,
    insert_contact_form,
    update_contact_form,
    insert_contact_field,
    update_contact_field,
    delete_contact_field,
    reorder_contact_fields,
)

# Contact submissions
from .contact_submissions import (
    insert_contact_submission,
    get_contact_submission,
    list_contact_submissions,
)
