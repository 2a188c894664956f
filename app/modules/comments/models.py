# Supabase table: comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

comments:
- id: uuid (primary key)
- laag_id: uuid (foreign key to laags.id)
- user_id: uuid (foreign key to profiles.id) - author
- comment: text (not null)
- is_deleted: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
