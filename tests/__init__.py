"""Tests for TP-Link Easy Smart switch sync."""
