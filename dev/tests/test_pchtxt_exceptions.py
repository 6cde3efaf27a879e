import pytest

from pchtxt.exceptions import (
    BaseError,
    ConfigurationError,
    FileOperationError,
    HexValueError,
    IpsFormatError,
    MissingBuildIdError,
    OffsetRangeError,
    PatchTextError,
    ValidationError,
)


def test_patch_text_error_carries_line_details():
    error = OffsetRangeError("123456789", 12, "123456789 00")

    assert isinstance(error, PatchTextError)
    assert str(error) == "offset: 123456789 out of range"
    assert error.line_num == 12
    payload = error.to_dict()
    assert payload["message"] == "offset: 123456789 out of range"
    assert payload["error_code"] == error.error_code
    assert payload["details"] == {"line_num": 12, "line_text": "123456789 00"}
    assert "timestamp" in payload


def test_hex_value_error_message_names_token():
    error = HexValueError("bad length for hex values", "ABC", 3, "0 ABC")
    assert str(error) == "bad length for hex values: ABC"


def test_missing_build_id_message():
    assert str(MissingBuildIdError(1, "@enabled")) == "missing build id, abort parsing"


def test_validation_error_is_configuration_error():
    error = ValidationError("bad", field_name="logging.level", file_path="cfg.yaml")

    assert isinstance(error, ConfigurationError)
    assert error.error_code == "VALIDATION_ERROR"
    assert error.details == {"field_name": "logging.level", "file_path": "cfg.yaml"}


@pytest.mark.parametrize(
    "error",
    [
        ConfigurationError("x"),
        FileOperationError("x", "/tmp/a", "write"),
        IpsFormatError("x", 5),
        MissingBuildIdError(),
    ],
)
def test_all_errors_share_base(error):
    assert isinstance(error, BaseError)
    assert error.error_code
