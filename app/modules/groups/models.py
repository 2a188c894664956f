# Supabase tables: groups, groupMembers
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key)
- group_name: text (not null)
- group_picture: text (nullable) - path inside the "group" storage bucket
- no_members: integer - written once at creation (members + owner), never recounted
- owner: uuid (foreign key to profiles.id, not null)
- is_deleted: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

groupMembers:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null)
- group_member: uuid (foreign key to profiles.id, not null)
- is_removed: boolean (default: false) - removal flips this, re-adding flips it back
- created_at: timestamp (default: now())

Several rows may exist for one (group_id, group_member) pair; the most recent
one is the one that gets re-activated.
"""
