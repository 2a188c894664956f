# Supabase tables: laags, laagAttendees
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

laags:
- id: uuid (primary key)
- what: text (1..25 chars)
- where: text (1..50 chars)
- why: text (nullable, up to 250 chars)
- type: text - one of constants.LAAG_TYPES
- estimated_cost: numeric (>= 0)
- actual_cost: numeric (nullable until completion)
- status: text - Planning | Completed | Cancelled
- privacy: text - public | group-only
- when_start: timestamp
- when_end: timestamp
- fun_meter: numeric (nullable, 0..10)
- organizer: uuid (foreign key to profiles.id)
- group_id: uuid (foreign key to groups.id)
- is_deleted: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

laagAttendees:
- id: uuid (primary key)
- laag_id: uuid (foreign key to laags.id)
- attendee_id: uuid (foreign key to profiles.id)
- is_removed: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Duplicate active rows for one (laag_id, attendee_id) can exist; readers collapse them.
"""
