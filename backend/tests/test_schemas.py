import pytest

from climamate.errors import ValidationError
from climamate.schemas import CITY_TOO_LONG_MESSAGE, MAX_CITY_LENGTH, parse_location_query


def test_location_query_is_trimmed() -> None:
    assert parse_location_query("  Lagos ") == "Lagos"
    assert parse_location_query("x" * MAX_CITY_LENGTH) == "x" * MAX_CITY_LENGTH


@pytest.mark.parametrize(
    ("city", "message"),
    [(None, "Please enter a city"), ("  ", "Please enter a city"), ("x" * (MAX_CITY_LENGTH + 1), CITY_TOO_LONG_MESSAGE)],
)
def test_location_query_rejections_carry_user_message(city, message) -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_location_query(city)

    assert excinfo.value.user_message == message
