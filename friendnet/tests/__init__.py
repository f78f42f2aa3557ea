"""Tests spanning more than one friendnet service."""
