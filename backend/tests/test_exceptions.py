from scheduleboard.core.exceptions import AppError, ConfigurationError, OptimizerError, ResourceNotFoundError


def test_optimizer_error_structure():
    err = OptimizerError(message="Test error", details={"foo": "bar"})
    assert err.status_code == 400
    assert err.message == "Test error"
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}
    assert AppError("Teapot", status_code=418).status_code == 418


def test_not_found_and_configuration_errors():
    missing = ResourceNotFoundError("Optimizer job", "abc")
    assert missing.status_code == 404
    assert missing.message == "Optimizer job with id abc not found"
    assert missing.details == {"resource_type": "Optimizer job", "resource_id": "abc"}

    bad = ConfigurationError("bad")
    assert bad.status_code == 500
    assert str(bad) == "bad"
