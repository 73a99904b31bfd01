"""
modraw-sim Test Suite

This package contains tests for the .modraw capture parser and real-time replay.

Structure:
- unit/: Unit tests for individual components
- integration/: Multi-file batch replay and CLI runs
- fixtures/: Synthetic capture builders and a fake clock
"""
