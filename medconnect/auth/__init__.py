"""
Authentication module for the MedConnect platform.

This module provides account functionality including:
- User registration, with doctor profile creation for doctors
- Email/password and Google sign-in
- Email verification
- Password reset
- JWT session tokens
"""
