# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - Password and OAuth sign in (PKCE flow for OAuth)
# - Session issue and refresh
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.sign_in_with_oauth() - Start the provider redirect (stores the PKCE verifier)
- auth.exchange_code_for_session() - Finish the provider redirect on /auth/callback
- auth.get_user() - Validate the session held in the auth cookie
- auth.sign_out() - Revoke the session and clear the cookie

The session lives in an HttpOnly cookie written through app.database.supabase_client.CookieStorage.
The optional full name given at sign up is kept in user_metadata and pre-fills onboarding.
"""
