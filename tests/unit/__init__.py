"""
Unit tests for sequence-retry.

Run with virtual timers only; no real delays are waited.
"""
