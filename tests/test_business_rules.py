"""Tests for company formation business rules."""

import pytest
from formation_engine.workflow.business_rules import (
    activity_fee_units,
    contains_banned_token,
    evaluate_rule,
    validate_activities_selection,
    validate_company_name,
    validate_share_capital,
    validate_visa_package,
)
from formation_engine.workflow.form_config import load_form_config


def make_config(banned=None, case_sensitive=True, min_length=2):
    return load_form_config({
        "workflow_type": "test_company_formation",
        "name": "Rules Form",
        "freezone": {"code": "TEST"},
        "steps": [{"id": "details", "title": "Details", "component": "CompanyDetailsStep"}],
        "validation_rules": {
            "banned_words": {"tokens": banned or [], "case_sensitive": case_sensitive},
            "name_restrictions": {"single_word_min_length": min_length},
        },
    })


@pytest.fixture
def config():
    return make_config(banned=["Dubai", "Bank"], case_sensitive=False)


def test_company_name_required(config):
    """Test that a blank name yields only the required error."""
    for name in (None, "", "   "):
        result = validate_company_name(config, name)
        assert result.valid is False
        assert result.errors == ["Name is required"]


def test_company_name_banned_tokens_case_insensitive(config):
    """Test banned tokens are matched regardless of case when configured."""
    result = validate_company_name(config, "dubai bank holdings")

    assert result.valid is False
    assert result.errors == ["Name cannot contain 'Dubai'", "Name cannot contain 'Bank'"]


def test_company_name_banned_tokens_case_sensitive():
    """Test case-sensitive matching only blocks the exact spelling."""
    config = make_config(banned=["UAE"])

    assert validate_company_name(config, "uae trading").valid is True
    assert validate_company_name(config, "UAE Trading").errors == ["Name cannot contain 'UAE'"]


def test_company_name_banned_token_is_substring_match():
    """Test that a token embedded in a longer word still matches."""
    config = make_config(banned=["UAE"])

    result = validate_company_name(config, "UAEnergy Solutions")

    assert result.errors == ["Name cannot contain 'UAE'"]


def test_contains_banned_token():
    """Test the matching policy on its own."""
    assert contains_banned_token("UAEnergy", "UAE") is True
    assert contains_banned_token("uaenergy", "UAE") is False
    assert contains_banned_token("uaenergy", "UAE", case_sensitive=False) is True


def test_company_name_single_word_length():
    """Test single-word names shorter than the minimum are rejected."""
    config = make_config(min_length=3)

    assert validate_company_name(config, "AB").errors == ["Single word names must be at least 3 characters"]
    assert validate_company_name(config, "  ABC  ").valid is True
    assert validate_company_name(config, "A B").valid is True


def test_company_name_reports_all_violations():
    """Test a name breaking several rules gets every message at once."""
    config = make_config(banned=["X"])

    result = validate_company_name(config, "X")

    assert result.errors == ["Name cannot contain 'X'", "Single word names must be at least 2 characters"]


def test_company_name_validation_is_idempotent(config):
    """Test repeated calls give identical results."""
    first = validate_company_name(config, "Dubai Ventures")
    second = validate_company_name(config, "Dubai Ventures")

    assert first == second


def test_activities_empty_selection(config):
    """Test an empty selection with no main activity gives exactly two errors."""
    result = validate_activities_selection(config, [], None)

    assert result.errors == ["At least one activity must be selected", "Main activity must be selected"]


def test_activities_main_not_selected(config):
    """Test the main activity must be one of the selected ones."""
    result = validate_activities_selection(config, [1, 2], 3)

    assert result.errors == ["Main activity must be one of the selected activities"]


def test_activities_maximum(config):
    """Test selecting more than the maximum number of activities."""
    selected = list(range(1, 12))

    result = validate_activities_selection(config, selected, 1)

    assert result.errors == ["Maximum 10 activities allowed"]


def test_activities_valid(config):
    """Test a valid activity selection."""
    result = validate_activities_selection(config, [4, 5], 5)

    assert result.valid is True
    assert result.errors == []


def test_visa_package_bounds(config):
    """Test visa package minimum, maximum and partner limit."""
    assert validate_visa_package(config, 0).errors == ["Minimum 1 visa required"]
    assert validate_visa_package(config, 10, 11).errors == [
        "Maximum 9 visas allowed",
        "Partner visa count cannot exceed total visa package",
    ]
    assert validate_visa_package(config, 2, 1).valid is True


def test_share_capital_partner_visa_requirement(config):
    """Test partner visas raise the required share capital."""
    result = validate_share_capital(config, 40000, 1)

    assert result.valid is False
    assert result.errors == ["Partner visas require minimum 48000 AED share capital (48000 AED per visa)"]
    assert "48000 AED" in result.errors[0]


def test_share_capital_meets_partner_requirement(config):
    """Test capital exactly at the partner visa requirement passes."""
    result = validate_share_capital(config, 48000, 1)

    assert result.valid is True
    assert result.extra["requires_bank_letter"] is False


def test_share_capital_bank_letter(config):
    """Test capital above the threshold passes but needs a bank letter."""
    result = validate_share_capital(config, 200000, 0)

    assert result.valid is True
    assert result.to_dict() == {"valid": True, "errors": [], "requires_bank_letter": True}


def test_share_capital_minimum(config):
    """Test capital below the configured minimum."""
    result = validate_share_capital(config, 500)

    assert result.errors == ["Minimum share capital is 1000 AED"]


def test_share_capital_reports_both_violations(config):
    """Test minimum and partner visa violations are reported together."""
    result = validate_share_capital(config, 500, 2)

    assert result.errors == [
        "Minimum share capital is 1000 AED",
        "Partner visas require minimum 96000 AED share capital (48000 AED per visa)",
    ]


def test_evaluate_rule_dispatch(config):
    """Test rules can be invoked by name with loosely typed payloads."""
    assert evaluate_rule(config, "company_name", {"name": ""}).errors == ["Name is required"]
    assert evaluate_rule(config, "activities", {}).errors == [
        "At least one activity must be selected",
        "Main activity must be selected",
    ]
    assert evaluate_rule(config, "visa_package", {"visa_count": "3", "partner_visa_count": "1"}).valid is True

    capital = evaluate_rule(config, "share_capital", {"amount": "40000", "partner_visa_count": "1"})
    assert capital.valid is False
    assert capital.extra == {"requires_bank_letter": False}


def test_evaluate_rule_unknown(config):
    """Test an unknown rule name is reported, not raised."""
    result = evaluate_rule(config, "trade_name", {})

    assert result.valid is False
    assert result.errors == ["Unknown validation type"]


def test_activity_fee_units(config):
    """Test activities beyond the free allowance are counted."""
    assert activity_fee_units(config, [1, 2]) == 0
    assert activity_fee_units(config, [1, 2, 3, 4, 5]) == 2


def test_definition_delegates_to_rules(config):
    """Test the definition exposes the same rules as methods."""
    assert config.validate_share_capital(40000, 1) == validate_share_capital(config, 40000, 1)
    assert config.validate_activities_selection([1], 1).valid is True
    assert config.validate_visa_package(1).valid is True
    assert config.validate_company_name("Falcon Trading").valid is True


def test_evaluate_rule_lenient_counts(config):
    """Test counts read their leading integer and fall back to zero."""
    decimal = evaluate_rule(config, "visa_package", {"visa_count": "2.0", "partner_visa_count": "1"})
    assert decimal.valid is True

    garbage = evaluate_rule(config, "visa_package", {"visa_count": "abc"})
    assert garbage.errors == ["Minimum 1 visa required"]


def test_evaluate_rule_lenient_amount(config):
    """Test amounts read their leading number, so a thousands separator truncates."""
    separated = evaluate_rule(config, "share_capital", {"amount": "50,000"})
    assert separated.errors == ["Minimum share capital is 1000 AED"]

    garbage = evaluate_rule(config, "share_capital", {"amount": "abc"})
    assert garbage.errors == ["Minimum share capital is 1000 AED"]
    assert garbage.extra == {"requires_bank_letter": False}

    spaced = evaluate_rule(config, "share_capital", {"amount": " 48000.50 ", "partner_visa_count": "1 visa"})
    assert spaced.valid is True
