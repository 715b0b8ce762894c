import pytest

from phylopdf.date import Date, months_between
from phylopdf.errors import DateFormatError, PhyloPdfError


def test_parse_full_and_month_precision():
    assert Date.parse("2015-03-12") == Date(2015, 3, 12)
    month = Date.parse("2015-03")
    assert month == Date(2015, 3, 0)
    assert month.display() == "2015-03"
    assert str(Date(2015, 3, 2)) == "2015-03-02"


@pytest.mark.parametrize("text", ["", "2015", "2015-3-12", "2015-13-01", "2015-02-30", "abcd-ef-gh", "2015-03-12T"])
def test_parse_rejects(text):
    with pytest.raises(DateFormatError):
        Date.parse(text)


def test_date_error_is_value_and_phylopdf_error():
    with pytest.raises(ValueError):
        Date.parse("nope")
    with pytest.raises(PhyloPdfError):
        Date.parse("nope")


def test_empty_date():
    assert Date().empty()
    assert not Date()
    assert Date().display() == ""
    assert Date(2019, 1, 1)


def test_ordering():
    assert Date(2019, 1, 15) < Date(2019, 2, 1)
    assert Date(2018, 12, 31) < Date(2019, 1, 1)
    assert max(Date(2019, 5, 20), Date(2019, 1, 1)) == Date(2019, 5, 20)


def test_month_helpers():
    date = Date(2019, 3, 17)
    assert date.month_3() == "Mar"
    assert date.year_2() == "19"
    assert Date(2005, 1, 1).year_2() == "05"
    assert date.without_day() == Date(2019, 3, 1)
    assert Date().without_day().empty()


def test_add_months_crosses_years():
    assert Date(2019, 11, 1).add_months(3) == Date(2020, 2, 1)
    assert Date(2019, 2, 1).add_months(-3) == Date(2018, 11, 1)
    assert Date(2019, 12, 1).increment_month() == Date(2020, 1, 1)


def test_months_between():
    assert months_between(Date(2019, 1, 1), Date(2019, 5, 20)) == 4
    assert months_between(Date(2018, 11, 1), Date(2019, 2, 1)) == 3
    assert months_between(Date(2019, 5, 1), Date(2019, 1, 1)) == -4
    assert months_between(Date(2019, 5, 1), Date(2019, 5, 31)) == 0
