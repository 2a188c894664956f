# Supabase tables: laagNotifications, laagNotificationReads
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

laagNotifications:
- id: uuid (primary key)
- laag_id: uuid (foreign key to laags.id)
- group_id: uuid (foreign key to groups.id)
- laag_status: text - status the laag moved to (Planning on create, Completed, Cancelled)
- is_deleted: boolean (default: false)
- created_at: timestamp (default: now())

laagNotificationReads:
- id: uuid (primary key)
- notification_id: uuid (foreign key to laagNotifications.id)
- user_id: uuid (foreign key to profiles.id) - recipient
- is_read: boolean (default: false)
- read_at: timestamp (nullable)
- created_at: timestamp (default: now())

One read row per attendee that was active when the notification was created.
"""
