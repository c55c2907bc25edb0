import pytest

from nordic_sepa import (
    InvalidParameter,
    MissingParameter,
    RequestParams,
    UnsupportedCommand,
    check_params,
)
from nordic_sepa.commands import BASE_FIELDS, COMMANDS
from nordic_sepa.validation import validate


def test_complete_params_are_ok(danske_params):
    result = check_params(RequestParams.from_mapping(danske_params))
    assert result.ok
    assert result.missing is None
    result.raise_for_error()


@pytest.mark.parametrize("field", ["language", "target_id", "enc_cert_path", "content", "customer_id"])
def test_missing_field_is_reported_by_name(danske_params, field):
    del danske_params[field]
    result = check_params(RequestParams.from_mapping(danske_params))
    assert not result.ok
    assert result.missing == field
    with pytest.raises(MissingParameter) as exc_info:
        result.raise_for_error()
    assert exc_info.value.field == field


@pytest.mark.parametrize("value", [None, "", "   "])
def test_empty_values_count_as_missing(danske_params, value):
    danske_params["language"] = value
    assert check_params(RequestParams.from_mapping(danske_params)).missing == "language"


def test_first_missing_field_in_declared_order(danske_params):
    del danske_params["file_type"]
    del danske_params["customer_id"]
    assert check_params(RequestParams.from_mapping(danske_params)).missing == "customer_id"


def test_bank_and_command_are_checked_first(danske_params):
    del danske_params["bank"]
    del danske_params["language"]
    assert check_params(RequestParams.from_mapping(danske_params)).missing == "bank"


def test_unknown_command_is_unsupported(danske_params):
    danske_params["command"] = "get_user_info"
    result = check_params(RequestParams.from_mapping(danske_params))
    assert not result.ok
    assert isinstance(result.error, UnsupportedCommand)
    assert (result.error.bank, result.error.command) == ("danske", "get_user_info")


def test_bank_and_command_are_normalised(danske_params):
    danske_params.update(bank=" Danske ", command="UPLOAD_FILE")
    params = RequestParams.from_mapping(danske_params)
    assert (params.bank, params.command) == ("danske", "upload_file")
    assert check_params(params).ok


def test_status_is_not_required_for_danske_upload(danske_params):
    del danske_params["status"]
    assert check_params(RequestParams.from_mapping(danske_params)).ok


def test_nordea_does_not_require_language(nordea_params):
    assert check_params(RequestParams.from_mapping(nordea_params)).ok


def test_nordea_download_file_requires_file_reference(nordea_params):
    nordea_params["command"] = "download_file"
    assert check_params(RequestParams.from_mapping(nordea_params)).missing == "file_reference"


def test_invalid_environment(nordea_params):
    nordea_params["environment"] = "staging"
    result = check_params(RequestParams.from_mapping(nordea_params))
    assert result.invalid[0] == "environment"
    with pytest.raises(InvalidParameter):
        result.raise_for_error()


def test_environment_is_case_insensitive(nordea_params):
    nordea_params["environment"] = "test"
    assert check_params(RequestParams.from_mapping(nordea_params)).ok


def test_content_must_be_base64(danske_params):
    danske_params["content"] = "not base64!"
    result = check_params(RequestParams.from_mapping(danske_params))
    assert result.invalid[0] == "content"


def test_encrypt_is_rejected_for_banks_without_encryption(nordea_params):
    nordea_params["encrypt"] = True
    result = check_params(RequestParams.from_mapping(nordea_params))
    assert result.invalid[0] == "encrypt"


def test_unknown_keys_are_ignored(danske_params, caplog):
    danske_params["pin"] = "1234"
    params = RequestParams.from_mapping(danske_params)
    assert not hasattr(params, "pin")
    assert "pin" in caplog.text


def test_validate_raises(danske_params):
    del danske_params["file_type"]
    with pytest.raises(MissingParameter):
        validate(RequestParams.from_mapping(danske_params))


def test_every_variant_requires_base_fields():
    for spec in COMMANDS.values():
        assert spec.required[: len(BASE_FIELDS)] == BASE_FIELDS


@pytest.mark.parametrize("value", ["false", "FALSE", "0", "no", "", None, False])
def test_falsy_encrypt_values_disable_encryption(nordea_params, value):
    nordea_params["encrypt"] = value
    params = RequestParams.from_mapping(nordea_params)
    assert params.encrypt is False
    assert check_params(params).ok


@pytest.mark.parametrize("value", ["true", "Yes", "1", 1, True])
def test_truthy_encrypt_values_enable_encryption(danske_params, value):
    danske_params["encrypt"] = value
    params = RequestParams.from_mapping(danske_params)
    assert params.encrypt is True
    assert check_params(params).ok


def test_unrecognised_encrypt_value_is_invalid(danske_params):
    danske_params["encrypt"] = "maybe"
    result = check_params(RequestParams.from_mapping(danske_params))
    assert result.invalid[0] == "encrypt"
    assert isinstance(result.error, InvalidParameter)


@pytest.fixture
def full_params(danske_params):
    """Every field any variant needs; bank and command are set per test."""
    return dict(danske_params, file_reference="FR-1")


@pytest.mark.parametrize("key", sorted(COMMANDS), ids="/".join)
def test_every_required_field_is_enforced(full_params, key):
    spec = COMMANDS[key]
    for field in spec.required:
        params = dict(full_params, bank=spec.bank, command=spec.command)
        del params[field]
        with pytest.raises(MissingParameter) as exc_info:
            validate(RequestParams.from_mapping(params))
        assert exc_info.value.field == field
