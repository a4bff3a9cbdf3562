"""Test suite for sophy."""
