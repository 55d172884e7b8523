"""
Survey Taker Package

The survey-taking engine: walks a respondent through an ordered list of
questions one at a time, validates required answers, resolves identity and
anonymity policy, and submits the collected answers.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Survey storage or business rules (owned by the remote data layer)
    - Rendering, navigation, toasts or theming
    - Authoring, invitations or analytics

State changes go through one pure reducer over immutable snapshots.
All remote calls go through the SurveyDataService contract.
"""

__version__ = "0.1.0"
