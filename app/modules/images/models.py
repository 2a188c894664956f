# Supabase table: laagImages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

laagImages:
- id: uuid (primary key)
- laag_id: uuid (foreign key to laags.id)
- image: text - object path "{laag_id}/{uuid}.{ext}" inside the "laags" bucket
- is_deleted: boolean (default: false) - the blob itself is never removed
- created_at: timestamp (default: now())
"""
