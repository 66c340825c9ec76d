"""
Combat system module for the JRPG combat simulator.

This module handles damage resolution, the combat engine state machine,
enemy AI decisions, encounter orchestration and state snapshots.
"""
