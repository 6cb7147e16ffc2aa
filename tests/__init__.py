"""Tests for the hospital notifications service."""
