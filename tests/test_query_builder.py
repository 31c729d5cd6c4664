"""
Tests for client profile query construction.
"""

from carrierllm.pipeline.models import ClientProfile
from carrierllm.pipeline.steps.query_builder import build_profile_query, calculate_bmi


def test_empty_profile_uses_defaults():
    query = build_profile_query(ClientProfile())

    assert query.splitlines() == [
        "Client Profile:",
        "- Age: 35",
        "- Gender: Male",
        "- Health Status: Excellent",
        "- Occupation: Professional",
        "- Nicotine Use: never",
        "- Health Conditions: none",
        "- Coverage Amount: $500,000",
        "- Coverage Type: term",
        "- Term Length: 20 years",
        "- Income: $100,000",
    ]


def test_profile_values_replace_defaults(sample_profile):
    query = build_profile_query(sample_profile)

    assert "- Age: 40" in query
    assert "- Gender: Female" in query
    assert "- Occupation: Software Engineer" in query
    assert "- Coverage Amount: $750,000" in query
    assert "- Income: $145,000" in query
    assert "- State: TX" in query
    assert "- Build: 65 in, 140 lbs (BMI 23.3)" in query


def test_optional_lines_only_when_provided():
    query = build_profile_query(ClientProfile(age=50))

    assert "State" not in query
    assert "Build" not in query
    assert "Marijuana" not in query
    assert "DUI" not in query
    assert "Risk Activities" not in query


def test_history_flags_are_listed_as_conditions():
    profile = ClientProfile(
        major_conditions="sleep apnea",
        diabetes=True,
        cardiac_history=False,
        dui_history=True,
        risk_activities="scuba diving",
        marijuana_use="occasional",
    )
    query = build_profile_query(profile)

    assert "- Health Conditions: sleep apnea, diabetes" in query
    assert "- DUI History: yes" in query
    assert "- Risk Activities: scuba diving" in query
    assert "- Marijuana Use: occasional" in query


def test_camel_case_and_short_aliases():
    profile = ClientProfile.model_validate({
        "nicotine": "current",
        "coverage": 250000,
        "type": "whole",
        "termLength": 30,
        "unexpectedField": "ignored",
    })
    query = build_profile_query(profile)

    assert "- Nicotine Use: current" in query
    assert "- Coverage Amount: $250,000" in query
    assert "- Coverage Type: whole" in query
    assert "- Term Length: 30 years" in query


def test_calculate_bmi():
    assert calculate_bmi(70, 175) == 25.1
    assert calculate_bmi(None, 175) is None
