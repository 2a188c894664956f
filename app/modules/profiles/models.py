# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (nullable) - synced from auth.users
- full_name: text (nullable)
- username: text (nullable)
- website: text (nullable)
- avatar_url: text (nullable) - path inside the avatars bucket
- role: text (not null, default: 'user') - 'admin' grants admin pages
- is_deleted: boolean (default: false) - soft delete, set by admins
- is_darkmode: boolean (default: false)
- is_allow_notifications: boolean (default: true)
- updated_at: timestamp (nullable)
"""
