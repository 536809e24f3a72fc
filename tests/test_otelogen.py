import pytest

from oaspec import otelogen


def test_version():
    assert otelogen.version() == "0.2.0"


def test_sem_version_prefixes_version():
    assert otelogen.sem_version() == "semver:" + otelogen.version()


def test_operation_id_attribute():
    key, value = otelogen.operation_id("getPet")
    assert key == "oas.operation"
    assert value == "getPet"


@pytest.mark.parametrize("name", ["listPets", "", "создатьПитомца", "a b/c"])
def test_operation_id_keeps_value_and_fixed_key(name):
    key, value = otelogen.operation_id(name)
    assert key == "oas.operation"
    assert value == name


def test_operation_id_key_differs_from_metric_keys():
    attribute_key, _ = otelogen.operation_id("listPets")
    metric_keys = {
        otelogen.CLIENT_REQUEST_COUNT,
        otelogen.CLIENT_ERRORS_COUNT,
        otelogen.CLIENT_DURATION,
        otelogen.SERVER_REQUEST_COUNT,
        otelogen.SERVER_ERRORS_COUNT,
        otelogen.SERVER_DURATION,
    }
    assert attribute_key == "oas.operation"
    assert attribute_key not in metric_keys