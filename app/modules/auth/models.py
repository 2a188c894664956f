# Supabase Auth + profiles
# Credentials and sessions live in Supabase's auth.users table.
# Every auth user has exactly one row in public.profiles, created at registration.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (profile row is upserted right after)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the user behind a bearer JWT
- auth.sign_out() - Logout users

A profile with is_deleted = true is treated as deactivated: login is refused
and its bearer tokens are rejected by core.dependencies.
"""
